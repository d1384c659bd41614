"""
ITS protocol constants.

Well-known BTP ports (ETSI TS 103 248), message ids (ETSI TS 102 894-2),
application ids (ETSI TS 102 965), DSRC region ids and regional
extension kinds.
"""

from enum import IntEnum
from typing import Dict

from .base import MessageClass

# BTP well-known ports
ITS_WKP_CA = 2001
ITS_WKP_DEN = 2002
ITS_WKP_RLT = 2003
ITS_WKP_TLM = 2004
ITS_WKP_SA = 2005
ITS_WKP_IVI = 2006
ITS_WKP_TLC_SREM = 2007
ITS_WKP_TLC_SSEM = 2008
ITS_WKP_CPS = 2009
ITS_WKP_EVCSN = 2010
ITS_WKP_TPG = 2011
ITS_WKP_CHARGING = 2012
ITS_WKP_GPC = 2013
ITS_WKP_CTL = 2014
ITS_WKP_CRL = 2015
ITS_WKP_CERTIF_REQ = 2016

# ItsPduHeader messageID values
ITS_DENM = 1
ITS_CAM = 2
ITS_POI = 3
ITS_SPATEM = 4
ITS_MAPEM = 5
ITS_IVIM = 6
ITS_EV_RSR = 7
ITS_TISTPGTRANSACTION = 8
ITS_SREM = 9
ITS_SSEM = 10
ITS_EVCSN = 11
ITS_SAEM = 12
ITS_RTCMEM = 13

# ITS-AID values used by secured GeoNetworking
AID_CA = 36
AID_DEN = 37
AID_TLM = 137
AID_RLT = 138
AID_IVI = 139
AID_TLC = 140
AID_GN_MGMT = 141


class RegionId(IntEnum):
    """DSRC RegionId values."""

    NO_REGION = 0
    ADD_GRP_A = 1
    ADD_GRP_B = 2
    ADD_GRP_C = 3


class RegExtKind(IntEnum):
    """Regional extension points, one per parent DSRC construct."""

    ADVISORY_SPEED = 0
    COMPUTED_LANE = 1
    CONNECTION_MANEUVER_ASSIST = 2
    GENERIC_LANE = 3
    INTERSECTION_GEOMETRY = 4
    INTERSECTION_STATE = 5
    LANE_ATTRIBUTES = 6
    LANE_DATA_ATTRIBUTE = 7
    MAP_DATA = 8
    MOVEMENT_EVENT = 9
    MOVEMENT_STATE = 10
    NODE_ATTRIBUTE_SET_LL = 11
    NODE_ATTRIBUTE_SET_XY = 12
    NODE_OFFSET_POINT_LL = 13
    NODE_OFFSET_POINT_XY = 14
    POSITION_3D = 15
    REQUESTOR_DESCRIPTION = 16
    REQUESTOR_TYPE = 17
    RESTRICTION_USER_TYPE = 18
    ROAD_SEGMENT = 19
    SIGNAL_CONTROL_ZONE = 20
    SIGNAL_REQUEST = 21
    SIGNAL_REQUEST_MESSAGE = 22
    SIGNAL_REQUEST_PACKAGE = 23
    SIGNAL_STATUS = 24
    SIGNAL_STATUS_MESSAGE = 25
    SIGNAL_STATUS_PACKAGE = 26
    SPAT = 27


# Message id carried in the header for each supported class
MESSAGE_IDS: Dict[MessageClass, int] = {
    MessageClass.EVENT_NOTIFICATION: ITS_DENM,
    MessageClass.COOPERATIVE_AWARENESS: ITS_CAM,
    MessageClass.INTERSECTION_STATE: ITS_SPATEM,
    MessageClass.INTERSECTION_MAP: ITS_MAPEM,
    MessageClass.IVI: ITS_IVIM,
    MessageClass.CHARGING_SESSION: ITS_EV_RSR,
    MessageClass.SIGNAL_REQUEST: ITS_SREM,
    MessageClass.SIGNAL_STATUS: ITS_SSEM,
    MessageClass.CHARGING_POI: ITS_EVCSN,
    MessageClass.TRANSACTION_POI: ITS_TISTPGTRANSACTION,
}

# Ports registered for BTP-A and BTP-B
WELL_KNOWN_PORTS: Dict[int, MessageClass] = {
    ITS_WKP_DEN: MessageClass.EVENT_NOTIFICATION,
    ITS_WKP_CA: MessageClass.COOPERATIVE_AWARENESS,
    ITS_WKP_EVCSN: MessageClass.CHARGING_POI,
    ITS_WKP_CHARGING: MessageClass.CHARGING_SESSION,
    ITS_WKP_IVI: MessageClass.IVI,
    ITS_WKP_TPG: MessageClass.TRANSACTION_POI,
    ITS_WKP_TLC_SSEM: MessageClass.SIGNAL_STATUS,
    ITS_WKP_TLC_SREM: MessageClass.SIGNAL_REQUEST,
    ITS_WKP_RLT: MessageClass.INTERSECTION_MAP,
    ITS_WKP_TLM: MessageClass.INTERSECTION_STATE,
}

# Security v1 message types, keyed by the ITS message id they announce
SECURED_MESSAGE_TYPES: Dict[int, MessageClass] = {
    ITS_DENM: MessageClass.EVENT_NOTIFICATION,
    ITS_CAM: MessageClass.COOPERATIVE_AWARENESS,
}

# AID_TLC covers both SREM and SSEM; the header decides
APPLICATION_IDS: Dict[int, MessageClass] = {
    AID_DEN: MessageClass.EVENT_NOTIFICATION,
    AID_CA: MessageClass.COOPERATIVE_AWARENESS,
    AID_TLM: MessageClass.INTERSECTION_STATE,
    AID_RLT: MessageClass.INTERSECTION_MAP,
    AID_IVI: MessageClass.IVI,
    AID_TLC: MessageClass.SIGNAL_REQUEST,
}

# DSRC AddGrpC extension types, keyed by extension point
ADDGRPC_EXTENSIONS: Dict[RegExtKind, str] = {
    RegExtKind.CONNECTION_MANEUVER_ASSIST: "ConnectionManeuverAssist-addGrpC",
    RegExtKind.GENERIC_LANE: "ConnectionTrajectory-addGrpC",
    RegExtKind.NODE_ATTRIBUTE_SET_XY: "Control-addGrpC",
    RegExtKind.INTERSECTION_STATE: "IntersectionState-addGrpC",
    RegExtKind.MAP_DATA: "MapData-addGrpC",
    RegExtKind.POSITION_3D: "Position3D-addGrpC",
    RegExtKind.RESTRICTION_USER_TYPE: "RestrictionUserType-addGrpC",
    RegExtKind.SIGNAL_STATUS_PACKAGE: "SignalStatusPackage-addGrpC",
}

ADDGRPC_NAME = "DSRC Addition Grp C (EU)"
ADDGRPC_ABBREV = "dsrc.addgrpc"
