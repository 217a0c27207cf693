"""pysticky - sticky and staged windows for the niri compositor.

A small companion daemon which keeps selected windows visible on every
workspace by moving them along when the active workspace changes, and can
park them on a hidden "stage" workspace on demand.
The daemon runs as an asyncio service, communicating via Unix sockets.
"""
