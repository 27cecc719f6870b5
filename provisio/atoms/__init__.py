"""Package reserved for units of work; it holds no modules."""