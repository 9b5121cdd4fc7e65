from datetime import datetime, timezone
from pydantic import AliasChoices, AliasGenerator, BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel


class CustomModel(BaseModel):
    """
    프로젝트의 모든 Pydantic 스키마가 상속받는 공통 기본 모델.
    API 데이터 정책을 중앙에서 관리합니다.
    """
    model_config = ConfigDict(
        # 입력은 snake_case/camelCase 모두 허용, 출력은 camelCase
        alias_generator=AliasGenerator(
            validation_alias=lambda name: AliasChoices(name, to_camel(name)),
            serialization_alias=to_camel,
        ),
        populate_by_name=True,

        # SQLAlchemy 모델 객체를 Pydantic 스키마로 변환 가능하게 합니다.
        from_attributes=True,

        # 요청 본문에 정의되지 않은 필드는 무시합니다.
        extra="ignore",
    )

    @field_serializer('*', check_fields=False)
    def serialize_datetime(self, value, _info):
        """datetime 객체를 UTC 기준 ISO-8601 문자열로 변환합니다."""
        if isinstance(value, datetime):
            # naive datetime은 UTC로 간주 (SQLite는 tz 정보를 보존하지 않음)
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            else:
                value = value.astimezone(timezone.utc)
            return value.isoformat().replace("+00:00", "Z")
        return value


class Envelope(CustomModel):
    """모든 성공 응답이 공유하는 `{success: true, ...}` 래퍼."""
    success: bool = True


class MessageResponse(Envelope):
    message: str
