"""API Routes Registration"""

from flask_restx import Api

def register_routes(api: Api) -> None:
    """Register all API routes"""

    from estatemap.api.routes.map import map_ns

    api.add_namespace(map_ns, path="/map")
