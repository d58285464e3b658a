"""Unit tests for Service request assembly."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from cloudkit.common.core import (
    ApiError,
    FunctionInterceptor,
    MissingProjectIdError,
    RequestOptions,
)
from cloudkit.common.runtime import ApiResponse, HTTPTransport, Service, ServiceConfig


def make_service(base_url="http://x/", project_id_required=True, **options):
    transport = AsyncMock(return_value=ApiResponse(status=200, body={"ok": True}))
    options.setdefault("project_id", "p")
    service = Service(
        ServiceConfig(base_url=base_url, project_id_required=project_id_required),
        options,
        transport=transport,
    )
    return service, transport


def sent_opts(transport: AsyncMock) -> RequestOptions:
    transport.assert_awaited_once()
    return transport.await_args.args[0]


def tagging(name):
    def tag(opts):
        order = opts.headers.get("x-order")
        opts.headers["x-order"] = f"{order},{name}" if order else name
        return opts

    return FunctionInterceptor(tag)


class TestServiceInit:
    """Test Service construction."""

    def test_attributes(self):
        interceptors = [tagging("g")]
        service, transport = make_service(interceptors=interceptors)
        assert service.base_url == "http://x/"
        assert service.project_id == "p"
        assert service.project_id_required is True
        assert service.make_authenticated_request is transport
        assert service.global_interceptors is interceptors
        assert service.interceptors == []

    def test_default_transport(self):
        """Test an HTTPTransport is built when none is injected."""
        service = Service(
            ServiceConfig(base_url="https://api.example.com", scopes=("scope-a",)),
            {"project_id": "p", "timeout": 12.0},
        )
        transport = service.make_authenticated_request
        assert isinstance(transport, HTTPTransport)
        assert transport.scopes == ("scope-a",)
        assert transport.timeout.total == 12.0

    def test_project_id_required_defaults_true(self):
        assert ServiceConfig(base_url="x").project_id_required is True


class TestServiceRequest:
    """Test Service.request URI assembly and delegation."""

    @pytest.mark.asyncio
    async def test_joins_project_scoped_uri(self):
        service, transport = make_service()
        response = await service.request({"uri": "b"})

        assert sent_opts(transport).uri == "http://x/projects/p/b"
        assert response.body == {"ok": True}

    @pytest.mark.asyncio
    async def test_trims_slashes_per_segment(self):
        service, transport = make_service(base_url="https://api.example.com/v1/")
        await service.request({"uri": "/datasets/"})
        assert sent_opts(transport).uri == "https://api.example.com/v1/projects/p/datasets"

    @pytest.mark.asyncio
    async def test_collapses_colon_verbs(self):
        service, transport = make_service()
        await service.request({"uri": "items/:list"})
        assert sent_opts(transport).uri == "http://x/projects/p/items:list"

    @pytest.mark.asyncio
    async def test_without_project_scope(self):
        service, transport = make_service(project_id_required=False, project_id=None)
        await service.request(RequestOptions(uri="b"))
        assert sent_opts(transport).uri == "http://x/b"

    @pytest.mark.asyncio
    async def test_empty_uri(self):
        service, transport = make_service()
        await service.request({})
        assert sent_opts(transport).uri == "http://x/projects/p/"

    @pytest.mark.asyncio
    async def test_missing_project_id(self, monkeypatch):
        monkeypatch.delenv("GCLOUD_PROJECT", raising=False)
        service, transport = make_service(project_id=None)

        with pytest.raises(MissingProjectIdError):
            await service.request({"uri": "b"})
        transport.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_does_not_mutate_caller_options(self):
        service, _ = make_service()
        opts = RequestOptions(uri="b")
        await service.request(opts)
        assert opts.uri == "b"

    @pytest.mark.asyncio
    async def test_transport_errors_propagate(self):
        """Test transport errors surface verbatim, without retries."""
        service, transport = make_service()
        error = ApiError("boom", code=500)
        transport.side_effect = error

        with pytest.raises(ApiError) as exc_info:
            await service.request({"uri": "b"})
        assert exc_info.value is error
        transport.assert_awaited_once()


class TestServiceInterceptors:
    """Test interceptor ordering through Service.request."""

    @pytest.mark.asyncio
    async def test_global_then_service_then_call_scoped(self):
        service, transport = make_service(interceptors=[tagging("g1"), tagging("g2")])
        service.interceptors.append(tagging("s1"))

        await service.request({"uri": "b", "scoped_interceptors": [tagging("c1")]})

        opts = sent_opts(transport)
        assert opts.headers["x-order"] == "g1,g2,s1,c1"
        assert opts.scoped_interceptors == []
        assert "scoped_interceptors" not in opts.to_dict()

    @pytest.mark.asyncio
    async def test_interceptors_see_resolved_uri(self):
        seen = []
        service, _ = make_service()
        service.interceptors.append(FunctionInterceptor(lambda o: seen.append(o.uri) or o))

        await service.request({"uri": "b"})
        assert seen == ["http://x/projects/p/b"]

    @pytest.mark.asyncio
    async def test_global_list_appends_apply_to_later_requests(self):
        global_interceptors = []
        service, transport = make_service(interceptors=global_interceptors)
        global_interceptors.append(tagging("late"))

        await service.request({"uri": "b"})
        assert sent_opts(transport).headers["x-order"] == "late"


class TestServiceAuthorize:
    """Test the authorize-only invocation shape."""

    @pytest.mark.asyncio
    async def test_authorize_request(self):
        service, transport = make_service()
        service.interceptors.append(tagging("s1"))
        transport.authorize = AsyncMock(side_effect=lambda opts: opts.merged({"headers": {"Authorization": "Bearer t"}}))

        opts = await service.authorize_request({"uri": "b"})

        assert opts.uri == "http://x/projects/p/b"
        assert opts.headers == {"Authorization": "Bearer t"}
        transport.authorize.assert_awaited_once()
        transport.assert_not_awaited()


class TestServiceLifecycle:
    """Test Service cleanup."""

    @pytest.mark.asyncio
    async def test_context_manager_closes_transport(self):
        transport = MagicMock()
        transport.close = AsyncMock()
        service = Service(ServiceConfig(base_url="x"), {"project_id": "p"}, transport=transport)

        async with service:
            pass

        transport.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_without_closable_transport(self):
        async def transport(opts):
            return ApiResponse(status=200)

        service = Service(ServiceConfig(base_url="x"), {"project_id": "p"}, transport=transport)
        await service.close()
