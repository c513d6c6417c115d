from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator


def _cell_value(value: Any) -> Any:
    # kintone records wrap every field as {"type": ..., "value": ...}
    if isinstance(value, dict) and "value" in value:
        return value["value"]
    return value


class SimpleRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["simple"] = "simple"
    name: str

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: Any) -> str:
        value = _cell_value(value)
        if not isinstance(value, str) or not value.strip():
            raise ValueError("name must be a non-empty string")
        return value


class MemoRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: Literal["memo"] = "memo"
    memo: str = Field(validation_alias=AliasChoices("memo", "ra_memo_raw"))
    record_kind: str | None = Field(default=None, validation_alias=AliasChoices("record_kind", "recordKind"))
    extra_fields: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("extra_fields", "extraFields"),
    )
    auto_consent: dict[str, str] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("auto_consent", "autoConsent"),
    )

    @field_validator("memo", mode="before")
    @classmethod
    def _validate_memo(cls, value: Any) -> str:
        value = _cell_value(value)
        if not isinstance(value, str):
            raise ValueError("memo must be a string")
        return value

    @field_validator("record_kind", mode="before")
    @classmethod
    def _validate_record_kind(cls, value: Any) -> str | None:
        value = _cell_value(value)
        if value is None:
            return None
        if isinstance(value, list):
            return ",".join(str(item) for item in value)
        return str(value)

    @field_validator("extra_fields", mode="before")
    @classmethod
    def _validate_extra_fields(cls, value: Any) -> list[str]:
        value = _cell_value(value)
        if value is None:
            return []
        if isinstance(value, str):
            value = [item for item in value.replace("、", ",").split(",")]
        if not isinstance(value, list):
            raise ValueError("extra_fields must be a list of strings")
        return [str(_cell_value(item)).strip() for item in value if str(_cell_value(item)).strip()]

    @field_validator("auto_consent", mode="before")
    @classmethod
    def _validate_auto_consent(cls, value: Any) -> dict[str, str]:
        value = _cell_value(value)
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("auto_consent must be a mapping of field name to value")
        return {str(key): str(_cell_value(item)) for key, item in value.items()}


UpstreamRecord = Union[SimpleRecord, MemoRecord]


def _memo_candidate(payload: dict[str, Any]) -> dict[str, Any] | None:
    calib = payload.get("calib")
    if isinstance(calib, dict) and isinstance(calib.get("record"), dict):
        return calib["record"]
    if "memo" in payload or "ra_memo_raw" in payload:
        return payload
    return None


def parse_upstream_record(payload: Any) -> UpstreamRecord | None:
    """Try each known shape in order; None when neither applies."""
    if not isinstance(payload, dict):
        return None

    try:
        return SimpleRecord.model_validate({"name": payload.get("name")})
    except ValidationError:
        pass

    candidate = _memo_candidate(payload)
    if candidate is None:
        return None
    try:
        return MemoRecord.model_validate(candidate)
    except ValidationError:
        return None
