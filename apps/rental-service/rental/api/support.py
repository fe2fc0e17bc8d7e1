"""
Support and build information endpoints.
"""
import os
from dataclasses import asdict

from fastapi import APIRouter

from rental.utils.feature_flags import get_feature_flags

router = APIRouter(tags=["support"])

SERVICE_NAME = "rental-service"


@router.get("/build-info")
def get_build_info():
    """Return build and deployment information for the running service."""
    build_sha = os.getenv("BUILD_SHA")
    build_timestamp = os.getenv("BUILD_TIMESTAMP")
    image_tag = os.getenv("IMAGE_TAG")
    version = os.getenv("VERSION", "unknown")

    return {
        "build_sha": build_sha if build_sha else None,
        "build_timestamp": build_timestamp if build_timestamp else None,
        "image_tag": image_tag if image_tag else None,
        "service_name": SERVICE_NAME,
        "version": version,
    }


@router.get("/feature-flags")
def get_feature_flag_state():
    return asdict(get_feature_flags())
