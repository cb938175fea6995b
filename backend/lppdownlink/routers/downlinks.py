import logging
from typing import Any, Sequence

from fastapi import APIRouter, HTTPException

from ..config import load_downlink_settings
from ..downlink import (
    DownlinkError,
    PreparedDownlink,
    options_from_settings,
    prepare_downlink,
    target_from_settings,
)
from ..schemas import (
    CommonDownlinkIn,
    DownlinkOut,
    LightIntensityDownlinkIn,
    SunPositionDownlinkIn,
    SwitchingTimesDownlinkIn,
)
from .lpp import to_encode_out

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/downlinks", tags=["downlinks"])


def _prepare(entries: Sequence[list[Any]], password: str) -> PreparedDownlink:
    try:
        settings = load_downlink_settings()
        return prepare_downlink(
            entries,
            target_from_settings(settings),
            password,
            options_from_settings(settings),
        )
    except (DownlinkError, ValueError) as exc:
        logger.warning("Downlink rejected: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))


def to_downlink_out(prepared: PreparedDownlink) -> DownlinkOut:
    encoded = to_encode_out(prepared.result)
    return DownlinkOut(
        payload=encoded.payload,
        diagnostics=encoded.diagnostics,
        url=prepared.url,
        body=prepared.body,
    )


@router.post("/light-intensity", response_model=DownlinkOut)
def light_intensity(data: LightIntensityDownlinkIn):
    return to_downlink_out(_prepare(data.settings.to_entries(), data.password))


@router.post("/common", response_model=DownlinkOut)
def common_settings(data: CommonDownlinkIn):
    return to_downlink_out(_prepare(data.settings.to_entries(), data.password))


@router.post("/switching-times", response_model=DownlinkOut)
def switching_times(data: SwitchingTimesDownlinkIn):
    return to_downlink_out(_prepare(data.settings.to_entries(), data.password))


@router.post("/sun-position", response_model=DownlinkOut)
def sun_position(data: SunPositionDownlinkIn):
    return to_downlink_out(_prepare(data.settings.to_entries(), data.password))
