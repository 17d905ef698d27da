# gmvstream

Pure-Python building blocks for taking in RTP video and producing FLV. The
usual input is MPEG-PS carrying H.264, as GB28181 cameras send it. The
package has no dependencies outside the standard library.

## Modules

- `gmvstream.mode` holds the shared types and constants.
  - `ResMsg` is a JSON response envelope. It has `build_success`,
    `build_failed`, `build_failed_by_msg`, `define_res`,
    `build_success_data` and `to_json`.
  - `Media` is the input payload kind, `PS` or `H264`. `Media.build("PS")`
    returns the member, and an unknown name raises `StreamError`.
  - `PlayType` is `FLV` or `HLS`.
  - `HlsPiece` holds a segment duration that fits in one byte and a `live`
    flag. It has `to_dict` and `from_dict`.
  - `StreamError` is the base exception. It carries `message` and an
    optional `code`.
- `gmvstream.config` holds the settings.
  - `StreamConf.from_mapping(doc)` reads the `stream` section. Its fields are
    `expires` (default 6), `flv` (default true) and `hls` (default true).
    It raises `ConfigError` when both `flv` and `hls` are false, or when a
    value has the wrong type.
  - `ServerConf.from_mapping(doc)` reads the `server` section. Its fields
    and defaults are `name` (`stream-node-1`), `rtp_port` (18568),
    `rtcp_port` (18569), `http_port` (18570) and `hook_uri`
    (`http://127.0.0.1:18567`).
- `gmvstream.util.dump(file_name, data, seq=False, directory="./dump")`
  writes bytes under a directory and returns the path. It appends to
  `<name>.dump`. With `seq=True` it writes a new numbered file,
  `<name>-<n>.dump`, on each call.
- `gmvstream.rtp`
  - `RtpPacket.unmarshal(data)` parses an RTP packet, including its CSRC
    list, header extension and padding. It raises `ValueError` on bad input.
  - `TcpRtpBuffer` splits RTP-over-TCP byte streams into packets, keeping
    one buffer per connection. Each packet is framed with a 2-byte length.
    Call `fresh_data(local, remote, data)` to add bytes, and
    `remove_map(local, remote)` to drop a connection.
- `gmvstream.demuxer.DemuxContext(ssrc, packets)` reorders packets by
  sequence number. The packets can come from any iterable of objects that
  have `sequence_number`. The reorder window adapts between 1 and 16, and
  wrap-around of the sequence number is handled. Each call to
  `demux_packet(parser)` passes the next packet to `parser`. When the
  iterable is exhausted it raises `ChannelClosed`.
- `gmvstream.amf0` holds the AMF0 encoders: `encode_number`,
  `encode_boolean`, `encode_string`, `encode_ecma_array` and `encode`.
- `gmvstream.flv` holds the FLV structures for H.264:
  - `FlvHeader` and `PreviousTagSize`.
  - `TagType` and `TagHeader`.
  - `ScriptMetaData` and `ScriptTag`, which build the `onMetaData` script
    tag. Fields left unset are omitted.
  - `AvcDecoderConfigurationRecord` and `VideoTagDataFirst`, which build the
    AVC sequence header.
  - `VideoTagData`.
- `gmvstream.ps_header` holds the MPEG-PS parsers. Each `parse` method takes
  a binary stream and raises `PsParseError` on truncated or malformed data.
  - `PsHeader.parse` reads a pack header, starting after its start code.
  - `PsSysHeader.parse` reads a system header, starting after its start
    code.
  - `PsSysMap.parse` reads a program stream map, starting at its start
    code. `EsInfo.parse` reads one entry of that map.
- `gmvstream.pes`
  - `PesPacket` reads PES packets: `packet_length`, `read_video` and
    `skip_audio`.
  - `PsPacket.feed(payload, marker)` collects RTP payloads. It parses them
    when `marker` is true or when more than 1 MiB is buffered, and then
    returns the H.264 elementary stream data it found, or `None`. PS
    headers that cannot be parsed are logged and skipped. A stream id that
    is missing from the stream map raises `StreamError`. A stream type
    other than H.264 raises `StreamError` with code `10010`.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example: FLV preamble

`FlvHeader.to_bytes()` already ends with the zero previous-tag-size, so each
tag can follow it directly:

```python
from gmvstream.flv import FlvHeader, PreviousTagSize, TagHeader, TagType

body = b"\x17\x01\x00\x00\x00" + b"\x00\x00\x00\x05\x65\x88\x84\x00\x33"
tag = TagHeader.build(TagType.VIDEO, 0, len(body)).to_bytes()
stream = (
    FlvHeader.build(video=True, audio=False).to_bytes()
    + tag
    + body
    + PreviousTagSize(len(tag) + len(body)).to_bytes()
)
```

## Example: PS over TCP to H.264

```python
from gmvstream.pes import PsPacket
from gmvstream.rtp import RtpPacket, TcpRtpBuffer

buffer = TcpRtpBuffer()
ps = PsPacket()

def on_tcp_bytes(local, remote, received: bytes) -> None:
    for chunk in buffer.fresh_data(local, remote, received):
        packet = RtpPacket.unmarshal(chunk)
        h264 = ps.feed(packet.payload, packet.marker)
        if h264 is not None:
            ...  # Annex B H.264 data
```

## What the package does not do

The package provides the pieces of a stream server, not the server itself.
It does not include:

- network listeners, an HTTP endpoint or a command-line program;
- session tracking, expiry timers or hook callbacks;
- splitting H.264 into NAL units, or reading width, height or frame rate
  from an SPS, so `ScriptMetaData` values have to come from the caller;
- MP4 recording or HLS output.