"""RTP framing and reordering, MPEG-PS/PES parsing, AMF0 and FLV structures for H.264 video."""

__version__ = "0.1.0"