"""
The z21 subcommands. Each module registers its parsers with `register(subparsers)` and binds a handler taking
(app, args).
"""
