"""Gateway route inventory."""

from core.request_types import Backend, BodyStrategy
from core.router import Route, RouteTable, exact, prefix, route, template

ANY = None


def _auth_routes() -> list[Route]:
    auth = Backend.AUTH
    return [
        route("POST", exact("/api/v1/auth/sign-in"), auth),
        route("POST", exact("/api/v1/auth/sign-up"), auth),
        route("POST", exact("/api/v1/auth/verify-email"), auth),
        route("POST", exact("/api/v1/auth/resend-verification"), auth),
        route("POST", exact("/api/v1/auth/logout"), auth),
        route("GET", exact("/api/v1/auth/health"), auth),
    ]


def _user_routes() -> list[Route]:
    user = Backend.USER
    return [
        route(["GET", "POST"], exact("/api/v1/users"), user),
        route("GET", exact("/api/v1/users/health"), user),
        route("GET", exact("/api/v1/users/by-role"), user),
        route("POST", exact("/api/v1/users/bulk-import"), user),
        route(["GET", "PUT", "DELETE"], template("/api/v1/users/{id}"), user),
        route("PATCH", template("/api/v1/users/{id}/deactivate"), user),
        route("PATCH", template("/api/v1/users/{id}/activate"), user),
        route("PATCH", template("/api/v1/user/{id}/toggle-status"), user),
        route("PUT", template("/api/v1/users/{id}/password"), user),
        route("PUT", template("/api/v1/users/doctors/{id}"), user),
        route("PUT", template("/api/v1/users/nurses/{id}"), user),
        route("PATCH", template("/api/v1/users/doctors/state/{id}"), user),
        route("PATCH", template("/api/v1/users/nurses/state/{id}"), user),
    ]


def _organization_routes() -> list[Route]:
    organization = Backend.ORGANIZATION
    return [
        route(ANY, prefix("/api/v1/affiliations"), organization),
        route(ANY, prefix("/api/v1/departments"), organization),
        route(ANY, prefix("/api/v1/specialties"), organization),
    ]


def _medical_records_routes() -> list[Route]:
    records = Backend.MEDICAL_RECORDS
    return [
        # Binary download by id; outranks the documents prefix below
        route(
            "GET",
            template("/api/v1/documents/{id:objectid}"),
            records,
            BodyStrategy.STREAM_OUT,
        ),
        route(ANY, prefix("/api/v1/documents"), records, accepts_uploads=True),
        route(ANY, prefix("/api/v1/patients"), records, accepts_uploads=True),
        route(ANY, prefix("/api/v1/diagnostics"), records, accepts_uploads=True),
        route(ANY, prefix("/api/v1/diagnosis"), records, accepts_uploads=True),
        route(ANY, prefix("/api/v1/medical-records"), records, accepts_uploads=True),
    ]


def _audit_routes() -> list[Route]:
    return [route(ANY, prefix("/api/v1/audit"), Backend.AUDIT)]


def build_route_table() -> RouteTable:
    """Register every gateway route once at startup."""
    return RouteTable(
        [
            *_auth_routes(),
            *_user_routes(),
            *_organization_routes(),
            *_medical_records_routes(),
            *_audit_routes(),
        ]
    )
