"""
Command line client for the Roco Z21 control station.

- Conduit: a UDP socket bound to a local endpoint and connected to the station.
- Connection: the conduit plus the protocol. Requests are encoded and sent; a background thread decodes
  datagrams into events and queues them on the event stream.
- Event stream: replies and broadcasts share one queue. Exactly one reader at a time, which must hold the
  stream's lease: the correlator during a request, discovery during its window, or the monitor.
- Correlator: send a request, wait a bounded time for the matching reply.
- Discovery: trigger a CAN scan and fold the detector reports seen within a window into devices.
- Session resumption: the station keeps client state per UDP endpoint. The local endpoint of a profile's
  first connection is saved, and later invocations bind to the same port to pick the session up again.


## Threading

Sending is synchronous on the calling thread. Receiving runs on the connection's pump thread, which only
appends to the event stream. All waiting happens on the reader's side, with a deadline.

"""

__version__ = '0.1.0'
