#!/usr/bin/env python3
"""
ITS dispatch example.

Builds a registry with stand-in body decoders, delivers a few messages
the way a BTP transport would, and shows a Decode As override.
"""

import logging

from its_dispatch import (
    CauseCode,
    Dispatcher,
    MessageClass,
    RegExtKind,
    RegionId,
    build_default_registry,
)
from its_dispatch.protocols.header import ItsPduHeader, encode_pdu_header


def decode_cam(payload, context):
    """Stand-in CAM decoder: reports the payload size."""
    return {"cam_bytes": len(payload)}


def decode_denm(payload, context):
    """Stand-in DENM decoder: first byte is the cause, second the subcause."""
    context.cause_code = payload[0]
    field = context.subcause_field()
    return {"causeCode": payload[0], field.value: payload[1]}


def decode_mapem(payload, context):
    """Stand-in MAPEM decoder with one AddGrpC GenericLane extension."""
    context.region_id = RegionId.ADD_GRP_C
    context.extension_kind = RegExtKind.GENERIC_LANE
    ext = context.decode_extension(payload)
    return {"regional": ext.tree}


def decode_trajectory(payload, context):
    return {"connectionTrajectory": payload.hex()}


def message(message_id, payload):
    return encode_pdu_header(ItsPduHeader(2, message_id, 4242)) + payload


def main():
    logging.basicConfig(level=logging.INFO)

    registry = build_default_registry(
        {
            MessageClass.COOPERATIVE_AWARENESS: decode_cam,
            MessageClass.EVENT_NOTIFICATION: decode_denm,
            MessageClass.INTERSECTION_MAP: decode_mapem,
        },
        extension_decoders={"ConnectionTrajectory-addGrpC": decode_trajectory},
    )
    dispatcher = Dispatcher(registry)
    dispatcher.add_listener(lambda m: print(f"  tap: {m.summary()}"))

    print("CAM on port 2001:")
    result = dispatcher.deliver(message(2, bytes(20)), transport_port=2001)
    print(f"  {result.tree}")

    print("DENM, roadworks:")
    result = dispatcher.deliver(message(1, bytes([CauseCode.ROADWORKS, 4])), transport_port=2002)
    print(f"  {result.tree}")

    print("DENM in a security v1 packet:")
    result = dispatcher.deliver(message(1, bytes([CauseCode.ROADWORKS, 1])), secured_message_type=1)
    print(f"  {result.tree}")

    print("MAPEM with regional extension:")
    result = dispatcher.deliver(message(5, b"\xca\xfe"), transport_port=2003)
    print(f"  {result.tree}")

    print("SAEM (no decoder registered):")
    result = dispatcher.deliver(message(12, b"\x01\x02"), transport_port=2001)
    print(f"  {result.tree.hex}")

    print("Decode As: session 'capture' routes everything to CAM")
    dispatcher.decode_as.set_override("capture", 2)
    result = dispatcher.deliver(message(1, b"\x03\x01"), transport_port=2002, session="capture")
    print(f"  {result.tree}  prompt: {dispatcher.decode_as.prompt('capture')}")
    dispatcher.end_session("capture")

    print(f"Stats: {dispatcher.stats}")


if __name__ == "__main__":
    main()
