"""FastAPI приложение: вход, проксирование фида и отчеты."""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Any, Optional

import jwt
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from adsboard.config import get_settings
from adsboard.db.session import get_session
from adsboard.db.setup import ensure_schema
from adsboard.ingestion import FeedClient, FeedError, normalize
from adsboard.services import (
    DateRange,
    ExportFormat,
    FilterCriteria,
    SortDirection,
    SortState,
    apply_filters,
    export_detail,
    export_summary,
    filter_options,
    group_by_campaign,
    paginate,
    sort_records,
    summary_metrics,
)
from adsboard.services.auth import authenticate_user, create_access_token, decode_access_token
from adsboard.services.export import export_filename
from adsboard.services.pagination import DEFAULT_ROWS_PER_PAGE
from adsboard.services.records import NormalizedRecord, SummaryMetrics
from adsboard.services.sorting import DETAIL_SORT_KEYS, SUMMARY_SORT_KEYS

logger = logging.getLogger(__name__)

AUTH_REQUIRED = "Authentication required. Please log in."
SESSION_INVALID = "Invalid or expired session. Please log in again."
INVALID_CREDENTIALS = "Invalid username or password."
CREDENTIALS_REQUIRED = "Username and password are required."
LOGIN_FAILED = "An internal server error occurred during login."
FEED_FAILED = "Failed to retrieve ads data from external source."
INTERNAL_ERROR = "An internal server error occurred while processing your request."
INVALID_REQUEST = "Invalid request."

LOGIN_PATH = "/api/auth/login"

bearer_scheme = HTTPBearer(auto_error=False)


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


# --- Зависимости ---

def get_feed_client() -> FeedClient:
    settings = get_settings()
    return FeedClient(settings.data_url, timeout=settings.feed_timeout_seconds)


def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> dict:
    if credentials is None:
        raise HTTPException(status_code=401, detail=AUTH_REQUIRED)
    try:
        return decode_access_token(credentials.credentials)
    except jwt.PyJWTError as exc:
        logger.warning("Токен отклонен: %s", exc)
        raise HTTPException(status_code=403, detail=SESSION_INVALID)


def fetch_raw_feed(client: FeedClient) -> list[dict]:
    try:
        return client.fetch()
    except FeedError as exc:
        logger.error("Не удалось получить фид: %s", exc)
        raise HTTPException(status_code=500, detail=FEED_FAILED)


# --- Разбор параметров запроса ---

def _parse_date(value: Optional[str], name: str) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid date for {name}: {value}")


def _parse_int(value: Optional[str], name: str, default: int) -> int:
    if value is None or value == "":
        return default
    if not value.isdigit():
        raise HTTPException(status_code=400, detail=f"Invalid value for {name}: {value}")
    return int(value)


def criteria_from_params(params) -> FilterCriteria:
    try:
        date_range = DateRange.parse(params.get("date_range"))
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid date_range: {params.get('date_range')}")
    return FilterCriteria(
        campaign=params.get("campaign", ""),
        ad_name=params.get("ads_name", ""),
        platform=params.get("platform") or "All",
        objective=params.get("objective") or "All",
        date_range=date_range,
        custom_start=_parse_date(params.get("custom_start"), "custom_start"),
        custom_end=_parse_date(params.get("custom_end"), "custom_end"),
    )


def sort_state_from_params(params, allowed: frozenset[str]) -> SortState:
    key = params.get("sort_key") or None
    if key is not None and key not in allowed:
        raise HTTPException(status_code=400, detail=f"Invalid sort_key: {key}")
    try:
        direction = SortDirection.parse(params.get("sort_direction"))
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid sort_direction: {params.get('sort_direction')}")
    return SortState(key=key, direction=direction)


def prepare_records(client: FeedClient, request: Request) -> list[NormalizedRecord]:
    criteria = criteria_from_params(request.query_params)
    records = normalize(fetch_raw_feed(client))
    return apply_filters(records, criteria)


# --- Сериализация ---

def _finite(value: float) -> Optional[float]:
    # NaN не сериализуется в JSON
    return None if math.isnan(value) else value


def record_to_dict(row: NormalizedRecord) -> dict[str, Any]:
    return {
        "date": row.date.isoformat(),
        "campaign": row.campaign,
        "ad_name": row.ad_name,
        "platform": row.platform,
        "objective": row.objective,
        "devices": row.devices,
        "segment": row.segment,
        "impressions": row.impressions,
        "clicks": row.clicks,
        "installs": row.installs,
        "follows": row.follows,
        "engagement": row.engagement,
        "spent": row.spent,
        "budget": row.budget,
        "ctr": row.ctr,
        "cost_metric": _finite(row.cost_metric),
    }


def metrics_to_dict(metrics: SummaryMetrics) -> dict[str, Any]:
    data = {
        "impressions": metrics.impressions,
        "clicks": metrics.clicks,
        "installs": metrics.installs,
        "follows": metrics.follows,
        "engagement": metrics.engagement,
        "spent": metrics.spent,
        "budget": metrics.budget,
        "ctr": metrics.ctr,
        "cpm": metrics.cpm,
        "cpc": metrics.cpc,
        "cpi": metrics.cpi,
        "cpe": metrics.cpe,
    }
    campaign = getattr(metrics, "campaign", None)
    if campaign is not None:
        data = {"campaign": campaign, **data}
    return data


# --- FastAPI setup и эндпоинты ---

def create_app() -> FastAPI:
    ensure_schema()
    app = FastAPI(title="Ads Report", version="0.1.0")

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)

    # Тело запроса проверяется только у входа: битый JSON = нет логина и пароля
    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("Некорректный запрос %s: %s", request.url.path, exc.errors())
        detail = CREDENTIALS_REQUIRED if request.url.path == LOGIN_PATH else INVALID_REQUEST
        return JSONResponse({"error": detail}, status_code=400)

    @app.get("/test", response_class=PlainTextResponse)
    def test_route() -> str:
        return "Test route is active!"

    @app.post(LOGIN_PATH, summary="Вход по логину и паролю")
    def login(payload: LoginRequest, session: Session = Depends(get_session)) -> dict:
        if not payload.username or not payload.password:
            raise HTTPException(status_code=400, detail=CREDENTIALS_REQUIRED)
        try:
            user = authenticate_user(session, payload.username, payload.password)
            if user is None:
                raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)
            token = create_access_token(user)
        except HTTPException:
            raise
        except Exception:
            logger.exception("Ошибка при входе пользователя %s", payload.username)
            raise HTTPException(status_code=500, detail=LOGIN_FAILED)
        logger.info("Пользователь %s вошел в систему", user.username)
        return {"message": "Login successful", "token": token}

    def proxy_feed(client: FeedClient) -> list[dict]:
        try:
            return fetch_raw_feed(client)
        except HTTPException:
            raise
        except Exception:
            logger.exception("Ошибка проксирования фида")
            raise HTTPException(status_code=500, detail=INTERNAL_ERROR)

    @app.get("/api/ads", summary="Сырые данные фида")
    def get_ads(
        user: dict = Depends(get_current_user),
        client: FeedClient = Depends(get_feed_client),
    ) -> list[dict]:
        return proxy_feed(client)

    @app.get("/api/auth/ads", summary="Сырые данные фида (старый путь)")
    def get_ads_legacy(
        user: dict = Depends(get_current_user),
        client: FeedClient = Depends(get_feed_client),
    ) -> list[dict]:
        return proxy_feed(client)

    @app.get("/api/report/detail", summary="Детальный отчет")
    def get_detail(
        request: Request,
        user: dict = Depends(get_current_user),
        client: FeedClient = Depends(get_feed_client),
    ) -> dict:
        params = request.query_params
        sort_state = sort_state_from_params(params, DETAIL_SORT_KEYS)
        page_number = _parse_int(params.get("page"), "page", 0)
        rows_per_page = _parse_int(params.get("rows_per_page"), "rows_per_page", DEFAULT_ROWS_PER_PAGE)
        if rows_per_page < 1:
            raise HTTPException(status_code=400, detail="rows_per_page must be positive")

        rows = sort_records(prepare_records(client, request), sort_state)
        page = paginate(rows, page_number, rows_per_page)
        return {
            "items": [record_to_dict(row) for row in page.items],
            "page": page.page,
            "rows_per_page": page.rows_per_page,
            "start_index": page.start_index,
            "end_index": page.end_index,
            "total": page.total,
            "total_pages": page.total_pages,
        }

    @app.get("/api/report/summary", summary="Сводка по кампаниям")
    def get_summary(
        request: Request,
        user: dict = Depends(get_current_user),
        client: FeedClient = Depends(get_feed_client),
    ) -> dict:
        sort_state = sort_state_from_params(request.query_params, SUMMARY_SORT_KEYS)
        groups = group_by_campaign(prepare_records(client, request), sort_state)
        return {"items": [metrics_to_dict(group) for group in groups], "count": len(groups)}

    @app.get("/api/report/totals", summary="Итоговые метрики")
    def get_totals(
        request: Request,
        user: dict = Depends(get_current_user),
        client: FeedClient = Depends(get_feed_client),
    ) -> dict:
        filtered = prepare_records(client, request)
        return {**metrics_to_dict(summary_metrics(filtered)), "records": len(filtered)}

    @app.get("/api/report/options", summary="Значения фильтров")
    def get_options(
        user: dict = Depends(get_current_user),
        client: FeedClient = Depends(get_feed_client),
    ) -> dict:
        return filter_options(normalize(fetch_raw_feed(client)))

    @app.get("/api/report/export", summary="Выгрузка отчета")
    def get_export(
        request: Request,
        user: dict = Depends(get_current_user),
        client: FeedClient = Depends(get_feed_client),
    ) -> Response:
        params = request.query_params
        view = params.get("view", "detail")
        if view not in {"detail", "summary"}:
            raise HTTPException(status_code=400, detail=f"Invalid view: {view}")
        try:
            fmt = ExportFormat.parse(params.get("format"))
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Invalid format: {params.get('format')}")

        filtered = prepare_records(client, request)
        if view == "detail":
            sort_state = sort_state_from_params(params, DETAIL_SORT_KEYS)
            content = export_detail(sort_records(filtered, sort_state), fmt)
        else:
            sort_state = sort_state_from_params(params, SUMMARY_SORT_KEYS)
            content = export_summary(group_by_campaign(filtered, sort_state), fmt)

        filename = export_filename(view, fmt)
        return Response(
            content=content,
            media_type=fmt.media_type,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    return app


app = create_app()
