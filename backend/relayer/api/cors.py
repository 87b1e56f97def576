"""Single-origin CORS handling.

Every response carries the allow headers for the one configured origin and
any OPTIONS request is answered with an empty 204, whatever its path.
"""

from fastapi import FastAPI, Request, Response


def cors_headers(origin: str) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Methods": "GET, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }


def install_cors(app: FastAPI, origin: str) -> None:
    headers = cors_headers(origin)

    @app.middleware("http")
    async def single_origin_cors(request: Request, call_next):
        if request.method == "OPTIONS":
            response = Response(status_code=204)
        else:
            response = await call_next(request)
        response.headers.update(headers)
        return response
