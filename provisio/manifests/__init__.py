"""Manifest providers, naming and loading."""