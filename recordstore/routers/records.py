"""Generic CRUD endpoints for one Repository."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from recordstore.domain.models import ID_FIELD, UpdateResult
from recordstore.domain.query import SORT_PARAM
from recordstore.repositories.repository import Repository

_UPDATE_STATUS = {
    UpdateResult.OK: 200,
    UpdateResult.INVALID: 400,
    UpdateResult.NOT_FOUND: 404,
    UpdateResult.CONFLICT: 409,
}


def _query_params(request: Request) -> dict[str, Any]:
    params: dict[str, Any] = {}
    sort: list[str] = []
    for name, value in request.query_params.multi_items():
        if name == SORT_PARAM:
            sort.append(value)
        else:
            params[name] = value
    if sort:
        params[SORT_PARAM] = sort
    return params


def build_router(repository: Repository, prefix: str | None = None) -> APIRouter:
    name = repository.objects_name
    router = APIRouter(prefix=prefix or f"/{name}", tags=[name])

    @router.get("")
    def list_records(request: Request):
        params = _query_params(request) or None
        error = repository.query_error(params)
        if error:
            return JSONResponse(error, status_code=400)
        return repository.get_all(params)

    @router.get("/{record_id}")
    def get_record(record_id: int):
        record = repository.get(record_id)
        if record is None:
            raise HTTPException(404, f"{repository.model.name} {record_id} not found")
        return record

    @router.post("", status_code=201)
    def create_record(payload: dict):
        record = repository.add(payload)
        if record is None:
            raise HTTPException(400, f"Invalid {repository.model.name}")
        if record.get("conflict"):
            return JSONResponse(record, status_code=409)
        return record

    @router.put("/{record_id}")
    def update_record(record_id: int, payload: dict):
        result = repository.update({**payload, ID_FIELD: record_id})
        status = _UPDATE_STATUS[result]
        if status != 200:
            raise HTTPException(status, result.value)
        return {"result": result.value}

    @router.delete("/{record_id}", status_code=204)
    def delete_record(record_id: int):
        if not repository.remove(record_id):
            raise HTTPException(404, f"{repository.model.name} {record_id} not found")
        return Response(status_code=204)

    return router
