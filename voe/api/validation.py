"""
Parameter Validation - Declarative schemas checked before any network I/O.

Every schema is a pydantic model (or a TypeAdapter for scalar values).
``validate()`` is the single entry point: it either returns the validated
value or raises a VALIDATION ``VoeError`` carrying field-level violations.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import (
    AfterValidator,
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    TypeAdapter,
    ValidationError,
    field_serializer,
)

from voe.api.exceptions import ERROR_MESSAGES, ErrorKind, VoeError

T = TypeVar("T")

_URL_ADAPTER = TypeAdapter(AnyUrl)


def _check_url(value: str) -> str:
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError:
        raise ValueError("Invalid url") from None
    return value


# ---------------------------------------------------------------------------
# Field types
# ---------------------------------------------------------------------------

NonEmptyStr = Annotated[str, StringConstraints(min_length=1)]
UrlStr = Annotated[str, AfterValidator(_check_url)]
PositiveInt = Annotated[int, Field(gt=0)]
FolderId = Annotated[int, Field(ge=0)]
FileCode = NonEmptyStr

FILE_NAME = TypeAdapter(NonEmptyStr, config=ConfigDict(strict=True))


# ---------------------------------------------------------------------------
# Operation parameter schemas
# ---------------------------------------------------------------------------

class OperationParams(BaseModel):
    """Base for request parameter schemas.

    Strict: numbers must be numbers, bools are not ints, unknown keys are
    rejected so typos never reach the API silently.
    """

    model_config = ConfigDict(strict=True, frozen=True, extra="forbid")

    def to_params(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class PaginationParams(OperationParams):
    page: Optional[PositiveInt] = None
    per_page: Optional[PositiveInt] = None


class FileListParams(PaginationParams):
    fld_id: Optional[FolderId] = None
    created: Optional[Union[str, int, float]] = None
    name: Optional[str] = None
    preview: Optional[bool] = None


class DMCAListParams(PaginationParams):
    last: Optional[PositiveInt] = None
    pending: Optional[bool] = None


class PremiumKeyParams(OperationParams):
    days: PositiveInt
    amount: PositiveInt


class RemoteUploadParams(OperationParams):
    url: UrlStr
    folder_id: Optional[FolderId] = None


class FileCloneParams(OperationParams):
    file_code: FileCode
    fld_id: Optional[FolderId] = None


class FileInfoParams(OperationParams):
    file_code: List[FileCode] = Field(min_length=1)

    @field_serializer("file_code")
    def join_codes(self, codes: List[str]) -> str:
        return ",".join(codes)


class FileDeleteParams(OperationParams):
    del_code: List[FileCode] = Field(min_length=1)

    @field_serializer("del_code")
    def join_codes(self, codes: List[str]) -> str:
        return ",".join(codes)


class FileRenameParams(OperationParams):
    file_code: FileCode
    title: str


class FileMoveParams(OperationParams):
    file_code: FileCode
    fld_id: FolderId


class FolderListParams(OperationParams):
    fld_id: Optional[FolderId] = None


class FolderCreateParams(OperationParams):
    name: str
    parent_id: Optional[FolderId] = None


class FolderRenameParams(OperationParams):
    fld_id: FolderId
    name: str


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def _violations(exc: ValidationError) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()))
        out.append({
            "field": field or "value",
            "message": err.get("msg", ""),
            "type": err.get("type", ""),
        })
    return out


def validate(schema: Union[Type[T], TypeAdapter], data: Any) -> T:
    """Validate ``data`` against ``schema`` or raise a VALIDATION VoeError.

    ``schema`` is either a pydantic model class (returns the model) or a
    ``TypeAdapter`` (returns the validated scalar).
    """
    try:
        if isinstance(schema, TypeAdapter):
            return schema.validate_python(data)
        return schema.model_validate(data)
    except ValidationError as exc:
        raise VoeError(
            ErrorKind.VALIDATION,
            ERROR_MESSAGES["VALIDATION_FAILED"],
            status=400,
            data=_violations(exc),
            local=True,
        ) from exc
