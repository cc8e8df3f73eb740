"""
A conduit is the datagram channel between the client and the control station. The connection layers the
protocol on top of it.
"""
