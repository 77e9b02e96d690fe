"""
API views for the content store.

Provides:
- ContentDetailsView: Store limits and usage
- ContentQueryView: Metadata of one content
- ContentFileView: Blob served inline with its detected MIME type
- ContentDownloadView: Blob served as an attachment
- ContentPreviewView: WebP preview
- ContentListView / ContentSearchView: Paged ids or summaries
- ContentAddView / ContentUpdateView / ContentRemoveView: Writes

Write requests are multipart forms with a "json" field holding a JSON
object and, for add/update, a "file" field. When CONTENT_TOKEN is set the
object must carry a matching "token".

Every error leaves through core.handlers.api_exception_handler as
{"error": ..., "error_code": ...}.
"""

from __future__ import annotations

import hmac
import json
from io import BytesIO
from typing import Any

from django.conf import settings
from django.http import FileResponse
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from contents.exceptions import (
    INVALID_FIELD_ERRORS,
    BadFile,
    BadJson,
    InvalidToken,
    Unauthorized,
)
from contents.serializers import (
    ContentAddSerializer,
    ContentListQuerySerializer,
    ContentRemoveSerializer,
    ContentSearchQuerySerializer,
    ContentUpdateSerializer,
    ContentWriteFormSerializer,
    DetailsSerializer,
    SummarySerializer,
    TokenSerializer,
)
from contents.services import get_content_store
from contents.types import Filter, PartialSource, Source, from_epoch_ms

PAGING_PARAMETERS = [
    OpenApiParameter(
        name="count",
        type=OpenApiTypes.NUMBER,
        location=OpenApiParameter.QUERY,
        description="Page size (default: 25; 0 or Infinity for all)",
        required=False,
    ),
    OpenApiParameter(
        name="page",
        type=OpenApiTypes.INT,
        location=OpenApiParameter.QUERY,
        description="Zero-based page index (default: 0)",
        required=False,
    ),
    OpenApiParameter(
        name="query",
        type=OpenApiTypes.BOOL,
        location=OpenApiParameter.QUERY,
        description="'true' to return content ids instead of summaries",
        required=False,
    ),
]


# =============================================================================
# Request Helpers
# =============================================================================


def parse_payload(request) -> dict[str, Any]:
    """
    Decode the "json" form field. A missing field is an empty object.

    Raises:
        BadJson: If the field is not a string holding a JSON object.
    """
    raw = request.data.get("json")
    if raw is None:
        return {}
    if not isinstance(raw, str):
        raise BadJson()

    try:
        payload = json.loads(raw)
    except ValueError as e:
        raise BadJson() from e

    if not isinstance(payload, dict):
        raise BadJson()
    return payload


def check_token(payload: dict[str, Any]) -> None:
    """
    Compare the payload's token with CONTENT_TOKEN (skipped when unset).

    Raises:
        InvalidToken: If the token is missing or not a string.
        Unauthorized: If it does not match.
    """
    secret = settings.CONTENT_TOKEN
    if not secret:
        return

    serializer = TokenSerializer(data=payload)
    if not serializer.is_valid():
        raise InvalidToken(details=serializer.errors)

    token = serializer.validated_data["token"]
    if not hmac.compare_digest(token.encode("utf-8"), secret.encode("utf-8")):
        raise Unauthorized()


def validate_fields(serializer_class, payload: dict[str, Any]) -> dict[str, Any]:
    """
    Validate the payload and raise the error of the first failing field.

    Fields are checked in the order the serializer declares them.
    """
    serializer = serializer_class(data=payload)
    if serializer.is_valid():
        return serializer.validated_data

    for field_name in serializer.fields:
        if field_name in serializer.errors:
            raise INVALID_FIELD_ERRORS[field_name](
                details={field_name: serializer.errors[field_name]}
            )
    raise BadJson(details=serializer.errors)


def uploaded_bytes(request, required: bool) -> bytes | None:
    """
    Read the "file" upload.

    Raises:
        BadFile: If the field is missing (when required) or not a file.
    """
    upload = request.FILES.get("file")
    if upload is None:
        if required or "file" in request.data:
            raise BadFile()
        return None
    return upload.read()


def summary_response(summary) -> Response:
    return Response(SummarySerializer(summary).data)


# =============================================================================
# Base View
# =============================================================================


class ContentAPIView(APIView):
    """
    Base view for content store endpoints.

    There are no user accounts: reads are public and writes are guarded by
    the shared secret checked in check_token().
    """

    authentication_classes: list = []
    permission_classes = [AllowAny]

    @property
    def store(self):
        return get_content_store()


# =============================================================================
# Reads
# =============================================================================


class ContentDetailsView(ContentAPIView):
    """
    GET /api/v1/details/
        Limits, whether writes are token-protected, and current usage.
    """

    @extend_schema(
        operation_id="get_store_details",
        summary="Get store details",
        responses={200: DetailsSerializer},
        tags=["Contents - Store"],
    )
    def get(self, request):
        store = self.store
        status = store.info()
        details = {
            "fileLimit": store.quota.file_limit,
            "protected": bool(settings.CONTENT_TOKEN),
            "storeLength": status.length,
            "storeLimit": store.quota.store_limit,
            "storeSize": status.size,
        }
        return Response(DetailsSerializer(details).data)


class ContentQueryView(ContentAPIView):
    """
    GET /api/v1/query/{uuid}/
        Metadata of one content.

    Response:
        200 OK: Summary
        404 Not Found: MISSING_CONTENT
    """

    @extend_schema(
        operation_id="query_content",
        summary="Get content metadata",
        responses={
            200: SummarySerializer,
            404: OpenApiResponse(description="Content not found"),
        },
        tags=["Contents - Read"],
    )
    def get(self, request, uuid):
        content = self.store.query(uuid)
        return summary_response(self.store.summarize(content))


class ContentFileView(ContentAPIView):
    """
    GET /api/v1/file/{uuid}/
        Primary blob, inline, with the MIME type detected from its bytes.
    """

    @extend_schema(
        operation_id="view_content_file",
        summary="View content inline",
        responses={
            200: OpenApiResponse(description="Binary content with its media type"),
            404: OpenApiResponse(description="Content not found"),
        },
        tags=["Contents - Read"],
    )
    def get(self, request, uuid):
        content = self.store.query(uuid)
        return FileResponse(BytesIO(content.blob), content_type=content.mime)


class ContentDownloadView(ContentAPIView):
    """
    GET /api/v1/download/{uuid}/
        Primary blob as an attachment named "<name>.<extension>".
    """

    @extend_schema(
        operation_id="download_content_file",
        summary="Download content",
        responses={
            200: OpenApiResponse(description="Binary content with attachment header"),
            404: OpenApiResponse(description="Content not found"),
        },
        tags=["Contents - Read"],
    )
    def get(self, request, uuid):
        content = self.store.query(uuid)
        return FileResponse(
            BytesIO(content.blob),
            as_attachment=True,
            filename=f"{content.name}.{content.extension}",
            content_type="application/octet-stream",
        )


class ContentPreviewView(ContentAPIView):
    """
    GET /api/v1/preview/{uuid}/
        WebP preview of a content.

    Response:
        404 Not Found: MISSING_CONTENT, or MISSING_ASSET if the preview file is gone
    """

    @extend_schema(
        operation_id="view_content_preview",
        summary="View content preview",
        responses={
            200: OpenApiResponse(description="WebP image"),
            404: OpenApiResponse(description="Content or preview not found"),
        },
        tags=["Contents - Read"],
    )
    def get(self, request, uuid):
        preview = self.store.read_preview(uuid)
        return FileResponse(BytesIO(preview), content_type="image/webp")


class ContentListView(ContentAPIView):
    """
    GET /api/v1/list/
        All contents, newest time first, paged.
    """

    @extend_schema(
        operation_id="list_contents",
        summary="List contents",
        parameters=PAGING_PARAMETERS,
        responses={200: SummarySerializer(many=True)},
        tags=["Contents - Search"],
    )
    def get(self, request):
        query_serializer = ContentListQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        count, page, ids_only = query_serializer.paging()

        uuids = self.store.list(count, page)
        if ids_only:
            return Response(uuids)
        return Response(SummarySerializer(self.store.summaries(uuids), many=True).data)


class ContentSearchView(ContentAPIView):
    """
    GET /api/v1/search/
        Filtered, ordered and paged contents.

    Query Parameters:
        begin, end: Time range in epoch milliseconds (inclusive)
        minimum, maximum: Size range in bytes (inclusive)
        name, extension, mime: Case-sensitive substring
        tags: Comma-separated tags, each one a criterion
        uuid: Exact content id
        loose: "true" to match any criterion instead of all
        sort: name, size, time (default) or uuid
        order: ascending or descending (default)
        count, page, query: As for /list/
    """

    @extend_schema(
        operation_id="search_contents",
        summary="Search contents",
        parameters=[
            OpenApiParameter(
                name=name,
                type=param_type,
                location=OpenApiParameter.QUERY,
                required=False,
            )
            for name, param_type in (
                ("begin", OpenApiTypes.NUMBER),
                ("end", OpenApiTypes.NUMBER),
                ("minimum", OpenApiTypes.NUMBER),
                ("maximum", OpenApiTypes.NUMBER),
                ("name", OpenApiTypes.STR),
                ("extension", OpenApiTypes.STR),
                ("mime", OpenApiTypes.STR),
                ("tags", OpenApiTypes.STR),
                ("uuid", OpenApiTypes.STR),
                ("loose", OpenApiTypes.BOOL),
                ("sort", OpenApiTypes.STR),
                ("order", OpenApiTypes.STR),
            )
        ]
        + PAGING_PARAMETERS,
        responses={200: SummarySerializer(many=True)},
        tags=["Contents - Search"],
    )
    def get(self, request):
        query_serializer = ContentSearchQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        params = query_serializer.validated_data
        count, page, ids_only = query_serializer.paging()

        begin, end = params.get("begin"), params.get("end")
        criteria = Filter(
            begin=from_epoch_ms(begin) if begin is not None else None,
            end=from_epoch_ms(end) if end is not None else None,
            minimum=params.get("minimum"),
            maximum=params.get("maximum"),
            name=params.get("name"),
            extension=params.get("extension"),
            mime=params.get("mime"),
            tags=params.get("tags", []),
            uuid=params.get("uuid"),
            loose=params.get("loose", False),
        )
        if "sort" in params:
            criteria.sort = params["sort"]
        if "order" in params:
            criteria.order = params["order"]

        uuids = self.store.search(criteria, count, page)
        if ids_only:
            return Response(uuids)
        return Response(SummarySerializer(self.store.summaries(uuids), many=True).data)


# =============================================================================
# Writes
# =============================================================================


class ContentWriteView(ContentAPIView):
    parser_classes = [MultiPartParser, FormParser]


class ContentAddView(ContentWriteView):
    """
    POST /api/v1/add/
        Upload a new content.

    Request:
        Content-Type: multipart/form-data
        - json: {"token"?, "data", "name", "tags", "time"}
        - file: Image or video

    Response:
        200 OK: Summary of the new content
        400 Bad Request: BAD_JSON, BAD_FILE or INVALID_<FIELD>
        401 Unauthorized: UNAUTHORIZED_TOKEN
        413: LARGE_SOURCE
        415: UNSUPPORTED_MIME
    """

    @extend_schema(
        operation_id="add_content",
        summary="Add content",
        request={"multipart/form-data": ContentWriteFormSerializer},
        responses={
            200: SummarySerializer,
            400: OpenApiResponse(description="Malformed request"),
            401: OpenApiResponse(description="Token mismatch"),
            413: OpenApiResponse(description="File or store limit exceeded"),
            415: OpenApiResponse(description="Not an accepted image or video"),
        },
        tags=["Contents - Write"],
    )
    def post(self, request):
        payload = parse_payload(request)
        check_token(payload)
        fields = validate_fields(ContentAddSerializer, payload)
        blob = uploaded_bytes(request, required=True)

        content = self.store.add(
            Source(
                blob=blob,
                data=fields["data"],
                name=fields["name"],
                tags=fields["tags"],
                time=from_epoch_ms(fields["time"]),
            )
        )
        return summary_response(self.store.summarize(content))


class ContentUpdateView(ContentWriteView):
    """
    POST /api/v1/update/
        Change any of a content's file, data, name, tags and time.

    Request:
        Content-Type: multipart/form-data
        - json: {"token"?, "uuid", "data"?, "name"?, "tags"?, "time"?}
        - file (optional): Replacement image or video
    """

    @extend_schema(
        operation_id="update_content",
        summary="Update content",
        request={"multipart/form-data": ContentWriteFormSerializer},
        responses={
            200: SummarySerializer,
            400: OpenApiResponse(description="Malformed request"),
            401: OpenApiResponse(description="Token mismatch"),
            404: OpenApiResponse(description="Content not found"),
            413: OpenApiResponse(description="File or store limit exceeded"),
            415: OpenApiResponse(description="Not an accepted image or video"),
        },
        tags=["Contents - Write"],
    )
    def post(self, request):
        payload = parse_payload(request)
        check_token(payload)
        fields = validate_fields(ContentUpdateSerializer, payload)
        blob = uploaded_bytes(request, required=False)

        partial = PartialSource(
            blob=blob,
            name=fields.get("name"),
            tags=fields.get("tags"),
            time=from_epoch_ms(fields["time"]) if "time" in fields else None,
        )
        if "data" in fields:
            partial.data = fields["data"]
            partial.has_data = True

        content = self.store.update(fields["uuid"], partial)
        return summary_response(self.store.summarize(content))


class ContentRemoveView(ContentWriteView):
    """
    POST /api/v1/remove/
        Delete a content and its files.

    Request:
        - json: {"token"?, "uuid"}

    Response:
        200 OK: Summary of the removed content
        404 Not Found: MISSING_CONTENT
    """

    @extend_schema(
        operation_id="remove_content",
        summary="Remove content",
        request={"multipart/form-data": ContentWriteFormSerializer},
        responses={
            200: SummarySerializer,
            400: OpenApiResponse(description="Malformed request"),
            401: OpenApiResponse(description="Token mismatch"),
            404: OpenApiResponse(description="Content not found"),
        },
        tags=["Contents - Write"],
    )
    def post(self, request):
        payload = parse_payload(request)
        check_token(payload)
        fields = validate_fields(ContentRemoveSerializer, payload)

        content = self.store.remove(fields["uuid"])
        return summary_response(self.store.summarize(content))
