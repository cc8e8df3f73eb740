from z21cli.errors import ProfileError


def context_add(app, args):
    host = args.host or app.settings.default_host
    port = args.port or app.settings.default_port
    app.store.add(args.name, host, port)
    app.print("Context %r added" % args.name)


def context_list(app, args):
    profiles = app.store.profiles()
    if not profiles:
        app.print("No contexts saved")
        return
    current = app.store.current_name
    width = max(len(p.name) for p in profiles) + 3
    for p in profiles:
        marker = "(*)" if p.name == current else "( )"
        app.print("%s %-*s %s:%d" % (marker, width, p.name, p.host, p.port))


def context_show(app, args):
    p = app.store.load_current()
    app.print("%s %s:%d" % (p.name, p.host, p.port))


def context_use(app, args):
    app.store.use(args.name)
    app.print("Current context set to %r" % args.name)


def context_rm(app, args):
    app.store.remove(args.name)
    app.print("Context %r removed" % args.name)


def context_reset(app, args):
    try:
        profile = app.store.load_current()
    except ProfileError:
        app.print("No current context set")
        return
    app.manager.reset(profile)
    app.print("Context %r reset and session data cleared" % profile.name)


def register(subparsers):
    parser = subparsers.add_parser('context', aliases=['ctx'], help="Manage Z21 configuration contexts")
    commands = parser.add_subparsers(dest='context_command', metavar='COMMAND')
    commands.required = True

    add = commands.add_parser('add', help="Add a new Z21 context")
    add.add_argument('name', metavar='NAME')
    add.add_argument('--host', help="Z21 host address")
    add.add_argument('--port', type=int, help="Z21 port")
    add.set_defaults(handler=context_add)

    commands.add_parser('list', aliases=['ls'], help="List all saved contexts").set_defaults(handler=context_list)
    commands.add_parser('show', help="Show current context").set_defaults(handler=context_show)

    use = commands.add_parser('use', help="Select a saved context")
    use.add_argument('name', metavar='NAME')
    use.set_defaults(handler=context_use)

    rm = commands.add_parser('rm', help="Remove a saved context")
    rm.add_argument('name', metavar='NAME')
    rm.set_defaults(handler=context_rm)

    commands.add_parser('reset', help="Reset current context and clear its session data") \
        .set_defaults(handler=context_reset)
