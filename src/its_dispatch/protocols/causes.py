"""
Cause/subcause code management.

A DENM situation carries a primary CauseCode and a raw subcause integer.
The meaning of the subcause depends on the cause, so each cause selects
the field that receives it.
"""

from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Mapping, Union


class CauseCode(IntEnum):
    """CauseCodeType values (ETSI TS 102 894-2)."""

    RESERVED = 0
    TRAFFIC_CONDITION = 1
    ACCIDENT = 2
    ROADWORKS = 3
    IMPASSABILITY = 5
    ADVERSE_WEATHER_CONDITION_ADHESION = 6
    AQUAPLANNNING = 7
    HAZARDOUS_LOCATION_SURFACE_CONDITION = 9
    HAZARDOUS_LOCATION_OBSTACLE_ON_THE_ROAD = 10
    HAZARDOUS_LOCATION_ANIMAL_ON_THE_ROAD = 11
    HUMAN_PRESENCE_ON_THE_ROAD = 12
    WRONG_WAY_DRIVING = 14
    RESCUE_AND_RECOVERY_WORK_IN_PROGRESS = 15
    ADVERSE_WEATHER_CONDITION_EXTREME_WEATHER_CONDITION = 17
    ADVERSE_WEATHER_CONDITION_VISIBILITY = 18
    ADVERSE_WEATHER_CONDITION_PRECIPITATION = 19
    SLOW_VEHICLE = 26
    DANGEROUS_END_OF_QUEUE = 27
    VEHICLE_BREAKDOWN = 91
    POST_CRASH = 92
    HUMAN_PROBLEM = 93
    STATIONARY_VEHICLE = 94
    EMERGENCY_VEHICLE_APPROACHING = 95
    HAZARDOUS_LOCATION_DANGEROUS_CURVE = 96
    COLLISION_RISK = 97
    SIGNAL_VIOLATION = 98
    DANGEROUS_SITUATION = 99


class SubCauseField(Enum):
    """Fields that can receive a subcause value."""

    TRAFFIC_CONDITION = "trafficConditionSubCauseCode"
    ACCIDENT = "accidentSubCauseCode"
    ROADWORKS = "roadworksSubCauseCode"
    ADVERSE_WEATHER_CONDITION_PRECIPITATION = "adverseWeatherCondition_PrecipitationSubCauseCode"
    ADVERSE_WEATHER_CONDITION_VISIBILITY = "adverseWeatherCondition_VisibilitySubCauseCode"
    ADVERSE_WEATHER_CONDITION_ADHESION = "adverseWeatherCondition_AdhesionSubCauseCode"
    ADVERSE_WEATHER_CONDITION_EXTREME_WEATHER_CONDITION = (
        "adverseWeatherCondition_ExtremeWeatherConditionSubCauseCode"
    )
    HAZARDOUS_LOCATION_ANIMAL_ON_THE_ROAD = "hazardousLocation_AnimalOnTheRoadSubCauseCode"
    HAZARDOUS_LOCATION_OBSTACLE_ON_THE_ROAD = "hazardousLocation_ObstacleOnTheRoadSubCauseCode"
    HAZARDOUS_LOCATION_SURFACE_CONDITION = "hazardousLocation_SurfaceConditionSubCauseCode"
    HAZARDOUS_LOCATION_DANGEROUS_CURVE = "hazardousLocation_DangerousCurveSubCauseCode"
    HUMAN_PRESENCE_ON_THE_ROAD = "humanPresenceOnTheRoadSubCauseCode"
    WRONG_WAY_DRIVING = "wrongWayDrivingSubCauseCode"
    RESCUE_AND_RECOVERY_WORK_IN_PROGRESS = "rescueAndRecoveryWorkInProgressSubCauseCode"
    SLOW_VEHICLE = "slowVehicleSubCauseCode"
    DANGEROUS_END_OF_QUEUE = "dangerousEndOfQueueSubCauseCode"
    VEHICLE_BREAKDOWN = "vehicleBreakdownSubCauseCode"
    POST_CRASH = "postCrashSubCauseCode"
    HUMAN_PROBLEM = "humanProblemSubCauseCode"
    STATIONARY_VEHICLE = "stationaryVehicleSubCauseCode"
    EMERGENCY_VEHICLE_APPROACHING = "emergencyVehicleApproachingSubCauseCode"
    COLLISION_RISK = "collisionRiskSubCauseCode"
    SIGNAL_VIOLATION = "signalViolationSubCauseCode"
    DANGEROUS_SITUATION = "dangerousSituationSubCauseCode"
    GENERIC = "subCauseCode"

    @property
    def abbrev(self) -> str:
        """Filter abbreviation shared by all subcause fields."""
        return "its.subCauseCode"


CAUSE_TO_SUBCAUSE: Mapping[int, SubCauseField] = MappingProxyType({
    CauseCode.TRAFFIC_CONDITION: SubCauseField.TRAFFIC_CONDITION,
    CauseCode.ACCIDENT: SubCauseField.ACCIDENT,
    CauseCode.ROADWORKS: SubCauseField.ROADWORKS,
    CauseCode.ADVERSE_WEATHER_CONDITION_PRECIPITATION: SubCauseField.ADVERSE_WEATHER_CONDITION_PRECIPITATION,
    CauseCode.ADVERSE_WEATHER_CONDITION_VISIBILITY: SubCauseField.ADVERSE_WEATHER_CONDITION_VISIBILITY,
    CauseCode.ADVERSE_WEATHER_CONDITION_ADHESION: SubCauseField.ADVERSE_WEATHER_CONDITION_ADHESION,
    CauseCode.ADVERSE_WEATHER_CONDITION_EXTREME_WEATHER_CONDITION: (
        SubCauseField.ADVERSE_WEATHER_CONDITION_EXTREME_WEATHER_CONDITION
    ),
    CauseCode.HAZARDOUS_LOCATION_ANIMAL_ON_THE_ROAD: SubCauseField.HAZARDOUS_LOCATION_ANIMAL_ON_THE_ROAD,
    CauseCode.HAZARDOUS_LOCATION_OBSTACLE_ON_THE_ROAD: SubCauseField.HAZARDOUS_LOCATION_OBSTACLE_ON_THE_ROAD,
    CauseCode.HAZARDOUS_LOCATION_SURFACE_CONDITION: SubCauseField.HAZARDOUS_LOCATION_SURFACE_CONDITION,
    CauseCode.HAZARDOUS_LOCATION_DANGEROUS_CURVE: SubCauseField.HAZARDOUS_LOCATION_DANGEROUS_CURVE,
    CauseCode.HUMAN_PRESENCE_ON_THE_ROAD: SubCauseField.HUMAN_PRESENCE_ON_THE_ROAD,
    CauseCode.WRONG_WAY_DRIVING: SubCauseField.WRONG_WAY_DRIVING,
    CauseCode.RESCUE_AND_RECOVERY_WORK_IN_PROGRESS: SubCauseField.RESCUE_AND_RECOVERY_WORK_IN_PROGRESS,
    CauseCode.SLOW_VEHICLE: SubCauseField.SLOW_VEHICLE,
    CauseCode.DANGEROUS_END_OF_QUEUE: SubCauseField.DANGEROUS_END_OF_QUEUE,
    CauseCode.VEHICLE_BREAKDOWN: SubCauseField.VEHICLE_BREAKDOWN,
    CauseCode.POST_CRASH: SubCauseField.POST_CRASH,
    CauseCode.HUMAN_PROBLEM: SubCauseField.HUMAN_PROBLEM,
    CauseCode.STATIONARY_VEHICLE: SubCauseField.STATIONARY_VEHICLE,
    CauseCode.EMERGENCY_VEHICLE_APPROACHING: SubCauseField.EMERGENCY_VEHICLE_APPROACHING,
    CauseCode.COLLISION_RISK: SubCauseField.COLLISION_RISK,
    CauseCode.SIGNAL_VIOLATION: SubCauseField.SIGNAL_VIOLATION,
    CauseCode.DANGEROUS_SITUATION: SubCauseField.DANGEROUS_SITUATION,
})


def subcause_field_for(cause: Union[CauseCode, int]) -> SubCauseField:
    """
    Get the field that receives the subcause of a cause code.

    Args:
        cause: Cause code (values outside CauseCode are accepted)

    Returns:
        Cause-specific SubCauseField, or SubCauseField.GENERIC
    """
    return CAUSE_TO_SUBCAUSE.get(int(cause), SubCauseField.GENERIC)
