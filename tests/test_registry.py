"""Tests for the message registry and default registration."""

import pytest

from its_dispatch.core.config import DispatchConfig, TransportConfig
from its_dispatch.core.registration import build_default_registry
from its_dispatch.core.registry import KeySpace, MessageRegistry
from its_dispatch.protocols.base import ConfigurationError, DecoderHandle, MessageClass
from its_dispatch.protocols.constants import (
    ADDGRPC_EXTENSIONS,
    AID_GN_MGMT,
    AID_TLC,
    ITS_CAM,
    ITS_DENM,
    ITS_POI,
    ITS_WKP_CA,
    ITS_WKP_SA,
    MESSAGE_IDS,
    RegExtKind,
    RegionId,
)


def body(name):
    """Create a body decode function tagged with a name."""

    def decode(payload, context):
        return {"decoder": name, "length": len(payload)}

    decode.__name__ = f"decode_{name}"
    return decode


class TestKeySpace:
    """Tests for KeySpace enum."""

    def test_values_unique(self):
        """Test all key space names are unique."""
        values = [k.value for k in KeySpace]
        assert len(values) == len(set(values))

    def test_message_id_key(self):
        """Test the message id table uses the operator-facing key."""
        assert KeySpace.MESSAGE_ID.value == "its.msg_id"

    def test_security_key_spaces(self):
        """Test both security layers have their own table."""
        assert KeySpace.SECURED_MESSAGE_TYPE.value == "geonw.sec.v1.msg_type"
        assert KeySpace.APPLICATION_ID.value == "geonw.sec.v2.app_id"


class TestMessageRegistry:
    """Tests for MessageRegistry."""

    def test_round_trip(self):
        """Test each registered message id resolves to its own handle."""
        registry = MessageRegistry()
        handles = {
            message_id: DecoderHandle.for_message(message_class, body(message_class.value))
            for message_class, message_id in MESSAGE_IDS.items()
        }
        for message_id, handle in handles.items():
            registry.register_message(message_id, handle)

        for message_id, handle in handles.items():
            assert registry.resolve(KeySpace.MESSAGE_ID, message_id) is handle
            assert registry.resolve_message(message_id) is handle

    def test_resolve_missing(self):
        """Test absent keys resolve to None in every key space."""
        registry = MessageRegistry()
        for space in KeySpace:
            assert registry.resolve(space, 12345) is None

    def test_key_spaces_independent(self):
        """Test the same number can be bound in each key space."""
        registry = MessageRegistry()
        handle = DecoderHandle.for_message(MessageClass.COOPERATIVE_AWARENESS, body("cam"))
        registry.register_port(36, MessageClass.IVI)
        registry.register_secured_message_type(36, MessageClass.EVENT_NOTIFICATION)
        registry.register_application_id(36, MessageClass.COOPERATIVE_AWARENESS)
        registry.register_message(36, handle)

        assert registry.resolve(KeySpace.PORT, 36) == MessageClass.IVI
        assert registry.resolve(KeySpace.SECURED_MESSAGE_TYPE, 36) == MessageClass.EVENT_NOTIFICATION
        assert registry.resolve(KeySpace.APPLICATION_ID, 36) == MessageClass.COOPERATIVE_AWARENESS
        assert registry.resolve(KeySpace.MESSAGE_ID, 36) is handle

    def test_duplicate_is_configuration_error(self):
        """Test re-registration is rejected and keeps the first entry."""
        registry = MessageRegistry()
        first = DecoderHandle.for_message(MessageClass.EVENT_NOTIFICATION, body("a"))
        second = DecoderHandle.for_message(MessageClass.EVENT_NOTIFICATION, body("b"))
        registry.register_message(ITS_DENM, first)

        with pytest.raises(ConfigurationError, match="already registered"):
            registry.register_message(ITS_DENM, second)
        assert registry.resolve_message(ITS_DENM) is first

    def test_wrong_entry_type(self):
        """Test entries must match the key space."""
        registry = MessageRegistry()
        handle = DecoderHandle.for_message(MessageClass.COOPERATIVE_AWARENESS, body("cam"))
        with pytest.raises(ConfigurationError):
            registry.register(KeySpace.PORT, ITS_WKP_CA, handle)
        with pytest.raises(ConfigurationError):
            registry.register(KeySpace.MESSAGE_ID, ITS_CAM, MessageClass.COOPERATIVE_AWARENESS)

    def test_negative_key(self):
        """Test negative keys are rejected."""
        registry = MessageRegistry()
        with pytest.raises(ConfigurationError):
            registry.register_port(-1, MessageClass.IVI)

    def test_equivalent_key_is_duplicate(self):
        """Test a key that converts to a registered key cannot rebind it."""
        registry = MessageRegistry()
        registry.register(KeySpace.PORT, ITS_WKP_CA, MessageClass.COOPERATIVE_AWARENESS)

        with pytest.raises(ConfigurationError, match="already registered"):
            registry.register(KeySpace.PORT, str(ITS_WKP_CA), MessageClass.EVENT_NOTIFICATION)
        with pytest.raises(ConfigurationError, match="already registered"):
            registry.register(KeySpace.PORT, float(ITS_WKP_CA), MessageClass.EVENT_NOTIFICATION)

        assert registry.resolve(KeySpace.PORT, ITS_WKP_CA) == MessageClass.COOPERATIVE_AWARENESS
        assert registry.keys(KeySpace.PORT) == [ITS_WKP_CA]

    @pytest.mark.parametrize("key", ["port", None, "20.5"])
    def test_non_integer_key(self, key):
        """Test keys that are not integers are configuration errors."""
        registry = MessageRegistry()
        with pytest.raises(ConfigurationError, match="must be an integer") as exc_info:
            registry.register_port(key, MessageClass.IVI)
        assert exc_info.value.cause is not None
        assert registry.count(KeySpace.PORT) == 0

    def test_listener_receives_normalized_key(self):
        """Test listeners see the integer key that was stored."""
        registry = MessageRegistry()
        events = []
        registry.add_listener(lambda space, key, entry: events.append(key))
        registry.register_port("2001", MessageClass.COOPERATIVE_AWARENESS)
        assert events == [2001]
        assert isinstance(events[0], int)

    def test_freeze(self):
        """Test nothing can be registered after freeze()."""
        registry = MessageRegistry()
        registry.register_port(ITS_WKP_CA, MessageClass.COOPERATIVE_AWARENESS)
        registry.freeze()

        assert registry.is_frozen
        assert registry.extensions.is_frozen
        with pytest.raises(ConfigurationError, match="frozen"):
            registry.register_port(ITS_WKP_SA, MessageClass.IVI)
        with pytest.raises(ConfigurationError, match="frozen"):
            registry.register_extension(
                RegionId.ADD_GRP_C,
                RegExtKind.MAP_DATA,
                DecoderHandle(name="late", abbrev="late", decode=body("late")),
            )
        assert registry.resolve(KeySpace.PORT, ITS_WKP_CA) == MessageClass.COOPERATIVE_AWARENESS

    def test_register_many(self):
        """Test bulk registration."""
        registry = MessageRegistry()
        registry.register_many(
            KeySpace.APPLICATION_ID,
            {37: MessageClass.EVENT_NOTIFICATION, 36: MessageClass.COOPERATIVE_AWARENESS},
        )
        assert registry.keys(KeySpace.APPLICATION_ID) == [36, 37]

    def test_register_many_conflict(self):
        """Test bulk registration stops at the first conflict."""
        registry = MessageRegistry()
        registry.register_port(2001, MessageClass.COOPERATIVE_AWARENESS)
        with pytest.raises(ConfigurationError):
            registry.register_many(
                KeySpace.PORT,
                {2000: MessageClass.IVI, 2001: MessageClass.IVI},
            )

    def test_listeners(self):
        """Test registration listeners are notified."""
        registry = MessageRegistry()
        events = []

        def listener(space, key, entry):
            events.append((space, key, entry))

        registry.add_listener(listener)
        registry.register_port(ITS_WKP_CA, MessageClass.COOPERATIVE_AWARENESS)
        registry.remove_listener(listener)
        registry.register_port(ITS_WKP_SA, MessageClass.IVI)

        assert events == [(KeySpace.PORT, ITS_WKP_CA, MessageClass.COOPERATIVE_AWARENESS)]

    def test_failing_listener_does_not_break_registration(self):
        """Test a raising listener is logged and ignored."""
        registry = MessageRegistry()

        def listener(space, key, entry):
            raise RuntimeError("listener failure")

        registry.add_listener(listener)
        registry.register_port(ITS_WKP_CA, MessageClass.COOPERATIVE_AWARENESS)
        assert registry.count(KeySpace.PORT) == 1

    def test_decoders_ordered_by_id(self):
        """Test decoders() lists handles in message id order."""
        registry = MessageRegistry()
        cam = DecoderHandle.for_message(MessageClass.COOPERATIVE_AWARENESS, body("cam"))
        denm = DecoderHandle.for_message(MessageClass.EVENT_NOTIFICATION, body("denm"))
        registry.register_message(ITS_CAM, cam)
        registry.register_message(ITS_DENM, denm)
        assert registry.decoders() == [denm, cam]

    def test_stats(self):
        """Test registry statistics."""
        registry = MessageRegistry()
        registry.register_port(ITS_WKP_CA, MessageClass.COOPERATIVE_AWARENESS)
        stats = registry.get_stats()
        assert stats["frozen"] is False
        assert stats["by_key_space"]["PORT"] == 1
        assert stats["by_key_space"]["MESSAGE_ID"] == 0
        assert stats["extensions"] == 0


class TestDecoderHandle:
    """Tests for DecoderHandle."""

    def test_for_message(self):
        """Test handle naming from a message class."""
        handle = DecoderHandle.for_message(MessageClass.COOPERATIVE_AWARENESS, body("cam"))
        assert handle.name == "ITS message - CAM"
        assert handle.abbrev == "its.message.cam"
        assert handle.message_class == MessageClass.COOPERATIVE_AWARENESS

    def test_message_class_names(self):
        """Test every class has a distinct abbreviation."""
        abbrevs = [c.abbrev for c in MessageClass]
        assert len(abbrevs) == len(set(abbrevs))
        assert MessageClass.CHARGING_SESSION.short_name == "EVRSR"


class TestBuildDefaultRegistry:
    """Tests for build_default_registry()."""

    def test_all_bindings(self):
        """Test the full default registration."""
        decoders = {c: body(c.value) for c in MessageClass}
        registry = build_default_registry(decoders)

        assert registry.is_frozen
        assert registry.count(KeySpace.PORT) == 10
        assert registry.count(KeySpace.APPLICATION_ID) == 6
        assert registry.count(KeySpace.SECURED_MESSAGE_TYPE) == 2
        assert registry.count(KeySpace.MESSAGE_ID) == 10
        assert registry.resolve(KeySpace.SECURED_MESSAGE_TYPE, ITS_DENM) == (
            MessageClass.EVENT_NOTIFICATION
        )
        assert registry.resolve(KeySpace.SECURED_MESSAGE_TYPE, ITS_CAM) == (
            MessageClass.COOPERATIVE_AWARENESS
        )
        assert registry.resolve(KeySpace.SECURED_MESSAGE_TYPE, ITS_POI) is None
        assert registry.resolve(KeySpace.PORT, ITS_WKP_SA) is None
        assert registry.resolve(KeySpace.APPLICATION_ID, AID_GN_MGMT) is None
        assert registry.resolve(KeySpace.APPLICATION_ID, AID_TLC) == MessageClass.SIGNAL_REQUEST

        for message_class, message_id in MESSAGE_IDS.items():
            handle = registry.resolve_message(message_id)
            assert handle.message_class == message_class
            assert handle.decode is decoders[message_class]

        assert registry.resolve_message(ITS_POI) is None

    def test_missing_body_decoders_left_unregistered(self):
        """Test only supplied body decoders are bound."""
        registry = build_default_registry({MessageClass.COOPERATIVE_AWARENESS: body("cam")})
        assert registry.keys(KeySpace.MESSAGE_ID) == [ITS_CAM]
        assert registry.resolve_message(ITS_DENM) is None

    def test_addgrpc_extensions(self):
        """Test GenericLane and Position3D bind to different AddGrpC handles."""
        trajectory = body("trajectory")
        position = body("position")
        registry = build_default_registry(
            {},
            extension_decoders={
                "ConnectionTrajectory-addGrpC": trajectory,
                "Position3D-addGrpC": position,
            },
        )

        lane = registry.extensions.lookup(RegionId.ADD_GRP_C, RegExtKind.GENERIC_LANE)
        pos = registry.extensions.lookup(RegionId.ADD_GRP_C, RegExtKind.POSITION_3D)
        assert lane.decode is trajectory
        assert pos.decode is position
        assert lane != pos
        assert "ConnectionTrajectory-addGrpC" in lane.name
        assert lane.abbrev == "dsrc.addgrpc"
        assert registry.extensions.lookup(RegionId.ADD_GRP_C, RegExtKind.MAP_DATA) is None

    def test_all_addgrpc_extensions(self):
        """Test every AddGrpC type can be registered."""
        decoders = {name: body(name) for name in ADDGRPC_EXTENSIONS.values()}
        registry = build_default_registry({}, extension_decoders=decoders)
        assert len(registry.extensions) == len(ADDGRPC_EXTENSIONS)

    def test_unknown_extension_name_ignored(self):
        """Test unknown AddGrpC type names are skipped."""
        registry = build_default_registry({}, extension_decoders={"Bogus-addGrpC": body("x")})
        assert len(registry.extensions) == 0

    def test_config_selects_bindings(self):
        """Test the transport config limits registered ports and ids."""
        config = DispatchConfig(
            transport=TransportConfig(
                ports=[ITS_WKP_CA], secured_message_types=[ITS_CAM], application_ids=[]
            )
        )
        registry = build_default_registry({}, config=config)
        assert registry.keys(KeySpace.PORT) == [ITS_WKP_CA]
        assert registry.keys(KeySpace.SECURED_MESSAGE_TYPE) == [ITS_CAM]
        assert registry.count(KeySpace.APPLICATION_ID) == 0
