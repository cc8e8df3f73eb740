"""
The Z21 LAN protocol: message types, the wire codec, and the event stream that carries replies and broadcasts
to whichever component currently owns it.
"""
