from fastapi import Request

from releasehub.services.distribution import Distribution


def get_distribution(request: Request) -> Distribution:
    return request.app.state.distribution
