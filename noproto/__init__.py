"""Protocol buffers encoding of declared messages into fixed-capacity buffers."""

__version__ = "0.1.0"
__all__ = ["message", "reader", "types", "wire", "writer"]