"""
api/dependencies.py -- Depends() helpers for the resource routers.

The services themselves are built once in the app lifespan (api/main.py) and
parked on app.state; these helpers just hand them to the route functions.
"""

from fastapi import Request

from study.service import StudyService


def get_study_service(request: Request) -> StudyService:
    return request.app.state.study_service
