# provisio

provisio is a library for the groundwork of machine provisioning: it gathers
facts about the machine and the run, reads a run configuration, finds manifest
directories (local or in a git repository), renders manifest files as
templates against those facts and parses them into `Manifest` objects.

## Installation

```
pip install provisio
```

## Modules

### `provisio.config`

- `Config`: a dataclass with `manifest_paths`, `variables`,
  `include_variables`, `disable_update_check` and `privilege`.
  `Config.from_dict(data)` builds one from parsed data; missing keys take
  their defaults and wrongly typed values raise `TypeError`.
- `Privilege`: `SUDO`, `DOAS` or `RUN0`. `str()` gives `sudo`, `doas` or
  `run0`; `Privilege.parse(text)` accepts either the lower-case or the
  capitalised name and raises `ValueError` otherwise.

### `provisio.values`

`Value` holds a context value: null, string, number or list (`ValueKind`).
Numbers are `Number` objects that keep their `NumberKind` (unsigned, signed,
float) and compare across kinds. `Value.from_python(obj)` converts plain
Python data, paths and bytes; `Value.from_json(data)` converts decoded JSON,
turning objects into lists of their values; `Value.deserialize(data)` is
strict and rejects booleans and mappings. `str()` joins lists with commas and
prints null as `null`; `repr()` gives forms such as `String("x")`,
`Number(2)` and `List [...]`.

### `provisio.contexts`

`build_contexts(config)` returns a dictionary keyed by prefix, each holding
`Value`s sorted by key:

| prefix              | contents                                                        |
|---------------------|-----------------------------------------------------------------|
| `user`              | `id`, `name`, `username`, `home_dir`, `config_dir`, `data_dir`, `data_local_dir`, `document_dir` |
| `os`                | `hostname`, `family`, `name`, `distribution`, `codename`, `bitness`, `version`, `edition` |
| `env`               | the process environment                                         |
| `variables`         | `Config.variables`                                              |
| `include_variables` | entries read from the URLs in `Config.include_variables`        |
| `privilege`         | `privilege`: the configured tool                                |

A provider that fails is logged as a warning and contributes an empty group.
Variable includes support three schemes, each also available as a function:
`file+toml://` (`toml_values`), `file+yaml://` (`yaml_values`) and `dns+txt://`
(`txt_record_values`, reading `key=value` TXT records of the host). Any other
scheme raises `ValueError`. `to_template_context(contexts)` turns the result
into plain data for templates.

The providers themselves are classes too: `UserContextProvider`,
`OSContextProvider`, `EnvContextProvider`, `VariablesContextProvider`,
`VariableIncludeContextProvider` and `PrivilegeContextProvider`, each with a
`prefix` and `get_contexts()` returning `KeyValueContext` and `ListContext`
items.

### `provisio.templating`

`render_string(template, context)` renders a Jinja template with undefined
variables treated as errors. `create_environment()` returns the environment,
which provides `read_file_contents(path=...)`: the file's text with
surrounding whitespace stripped.

### `provisio.manifests.providers`

`register_providers()` returns `LocalManifestProvider` and
`GitManifestProvider`. The local provider resolves any existing path. The git
provider recognises `https://`, `git://` and `ssh://` locations, understands
`repository#branch:path` (`parse_config_url`), and clones the repository with
the `git` executable into the user cache directory under
`provisio/manifests/git/`. Failures raise `ManifestProviderError`.

### `provisio.manifests.loader`

- `resolve(uri)` tries the providers in order and returns the resolved
  directory, raising `ManifestProviderError` if none can.
- `load(manifest_path, contexts)` walks the directory (skipping hidden entries
  and directories named `files`, staying on one file system, at most nine
  levels deep), renders each `.yaml`, `.yml` and `.toml` file as a template,
  parses it and returns a dictionary of `Manifest` objects. Files that fail to
  render or parse are logged and skipped.
- `get_manifest_name(directory, location)` derives the dotted name:
  `tools/git/main.yaml` becomes `tools.git`, `tools/hello.yaml` becomes
  `tools.hello`.
- `Manifest` holds `where`, `name`, `labels`, `depends`, `actions` (kept as
  parsed data), `root_dir` and `dag_index`.

### `provisio.steps.initializers`

Initializers answer a yes/no question before work runs: `CommandFound`
(command on `PATH`), `FileExists` and `SetEnvVars` (sets variables, always
true). `Ensure` and `SkipIf` wrap an initializer to say how its answer is
used.

### `provisio.utilities`

`get_binary_path(binary)` looks an executable up on `PATH` and raises
`FileNotFoundError` if it is missing; `get_privilege_provider(contexts)`
returns the configured privilege tool from built contexts.

## Example

```python
from provisio.config import Config
from provisio.contexts import build_contexts
from provisio.manifests.loader import load, resolve

contexts = build_contexts(Config(variables={"editor": "vim"}))
manifests = load(resolve("manifests"), contexts)

for name, manifest in sorted(manifests.items()):
    print(name, manifest.depends)
```

## What it does not do

provisio loads manifests but does not carry out their actions: it has no
units of work that create files, run commands or change permissions, no
finalizers or step runner, no dependency ordering between manifests and no
command-line program. `Manifest.actions` is left as parsed data for the
caller to interpret.

## Running the tests

```
pip install -e ".[test]"
pytest
```