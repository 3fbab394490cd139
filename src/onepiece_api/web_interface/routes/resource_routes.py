# src/onepiece_api/web_interface/routes/resource_routes.py
from typing import Dict, Any, Optional
import logging

from fastapi import APIRouter, Body, Depends, Request, Response

from onepiece_api.services.resource_config import ResourceConfig
from onepiece_api.services.resource_service import ResourceService
from onepiece_api.web_interface.dependencies import require_auth
from onepiece_api.web_interface.responses import success_response

logger = logging.getLogger(__name__)


def create_resource_router(config: ResourceConfig) -> APIRouter:
    """
    Build the CRUD router for one resource.

    Reads are public; create, update and delete require a bearer token.
    ``/export`` is declared before ``/{item_id}`` so it is not taken for an id.
    Ids are accepted as text and validated by the service, which reports INVALID_ID.
    Each configured ``Listing`` adds a read-only ``/{item_id}/<path>`` route.
    """
    router = APIRouter()
    label = config.label.capitalize()
    plural = config.key.replace("-", " ").capitalize()

    def get_service(request: Request) -> ResourceService:
        return request.app.state.resource_services[config.key]

    @router.get("")
    def list_items(request: Request, service: ResourceService = Depends(get_service)):
        """List with pagination, search, sorting and resource filters."""
        result = service.list(dict(request.query_params))
        return success_response(
            data=result.items,
            message=f"{plural} retrieved successfully",
            pagination=result.pagination.to_dict()
        )

    @router.get("/export")
    def export_items(request: Request, service: ResourceService = Depends(get_service)):
        """The requested page as CSV; accepts the same parameters as the list endpoint."""
        csv = service.export_csv(dict(request.query_params))
        return Response(
            content=csv,
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{config.key}.csv"'}
        )

    @router.get("/{item_id}")
    def get_item(item_id: str, service: ResourceService = Depends(get_service)):
        return success_response(data=service.get_by_id(item_id), message=f"{label} retrieved successfully")

    def related_endpoint(path: str):
        def list_related(item_id: str, service: ResourceService = Depends(get_service)):
            data = service.list_related(item_id, path)
            owner = data[config.label]
            return success_response(
                data=data,
                message=f"Found {len(data[path])} {path} for {config.label}: {owner['name']}"
            )
        return list_related

    for listing in config.listings:
        router.add_api_route(f"/{{item_id}}/{listing.path}", related_endpoint(listing.path), methods=["GET"],
                             name=f"list_{config.key}_{listing.path}")

    @router.post("", dependencies=[Depends(require_auth)])
    def create_item(payload: Optional[Dict[str, Any]] = Body(None),
                    service: ResourceService = Depends(get_service)):
        item = service.create(payload or {})
        return success_response(data=item, message=f"{label} created successfully", status_code=201)

    @router.put("/{item_id}", dependencies=[Depends(require_auth)])
    def update_item(item_id: str, payload: Optional[Dict[str, Any]] = Body(None),
                    service: ResourceService = Depends(get_service)):
        item = service.update(item_id, payload or {})
        return success_response(data=item, message=f"{label} updated successfully")

    @router.delete("/{item_id}", dependencies=[Depends(require_auth)])
    def delete_item(item_id: str, service: ResourceService = Depends(get_service)):
        service.delete(item_id)
        return success_response(message=f"{label} deleted successfully")

    return router
