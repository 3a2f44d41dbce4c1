"""Prometheus scrape endpoint.

Request metrics accumulate in the middleware; the stored-resource gauges are
refreshed from the database on each scrape so they never drift from what the
API would list.
"""

from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from task_manager.api.deps import get_store
from task_manager.api.observability.metrics import STORED_RESOURCES
from task_manager.core.storage import Store

router = APIRouter()


@router.get("/metrics", include_in_schema=False)
def prometheus_metrics(store: Store = Depends(get_store)) -> Response:
    for resource, count in store.counts().items():
        STORED_RESOURCES.labels(resource=resource).set(count)
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
