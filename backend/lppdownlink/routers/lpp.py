from fastapi import APIRouter, HTTPException, status

from ..lpp_encode import EncodeResult, encode
from ..lpp_types import SENSOR_TYPES, get_descriptor
from ..schemas import DiagnosticOut, EncodeIn, EncodeOut, SensorTypeOut

router = APIRouter(prefix="/api/lpp", tags=["lpp"])


def to_encode_out(result: EncodeResult) -> EncodeOut:
    return EncodeOut(
        payload=result.payload,
        diagnostics=[
            DiagnosticOut(
                index=d.index,
                channel=d.channel,
                type_name=d.type_name,
                reason=d.reason.value,
                message=d.message,
            )
            for d in result.diagnostics
        ],
    )


@router.get("/types", response_model=list[SensorTypeOut])
def list_types():
    return [SensorTypeOut.model_validate(desc) for desc in SENSOR_TYPES.values()]


@router.get("/types/{type_name}", response_model=SensorTypeOut)
def get_type(type_name: str):
    desc = get_descriptor(type_name)
    if desc is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown sensor type")
    return SensorTypeOut.model_validate(desc)


@router.post("/encode", response_model=EncodeOut)
def encode_entries(data: EncodeIn):
    # Skipped entries are reported, not rejected; an empty payload is still a 200
    return to_encode_out(encode(data.entries))
