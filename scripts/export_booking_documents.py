from __future__ import annotations

import argparse
import json
import os
import sys

SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.abspath(os.path.join(SCRIPT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


def load_env_file(env_path: str) -> None:
    if not os.path.exists(env_path):
        return
    with open(env_path, "r", encoding="utf-8") as env_file:
        for line in env_file:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            os.environ.setdefault(key, value)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export the confirmation and/or invoice PDF for a booking.")
    parser.add_argument("booking_id", help="Booking id to export.")
    parser.add_argument(
        "--env-file",
        default=os.path.join(PROJECT_ROOT, ".env"),
        help="Path to .env file.",
    )
    parser.add_argument(
        "--document",
        default="both",
        choices=["confirmation", "invoice", "both"],
        help="Which document(s) to write.",
    )
    parser.add_argument("--output-dir", default=".", help="Directory the PDFs are written to.")
    parser.add_argument("--token", default=None, help="Bearer token; stored for later runs.")
    parser.add_argument("--company-id", default=None, help="Company id; stored for later runs.")
    parser.add_argument(
        "--logout",
        action="store_true",
        help="Clear the stored token after exporting.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    load_env_file(os.path.abspath(args.env_file))

    from travel_desk.core.api_client import BookingApiClient
    from travel_desk.core.config import get_settings
    from travel_desk.core.credentials import FileCredentialStore
    from travel_desk.core.errors import AppError
    from travel_desk.core.logging import configure_logging
    from travel_desk.repositories.agents_repository import AgentsRepository
    from travel_desk.repositories.bookings_repository import BookingsRepository
    from travel_desk.repositories.users_repository import UsersRepository
    from travel_desk.services.documents_service import DocumentsService

    settings = get_settings()
    configure_logging(settings.log_level)
    credentials = FileCredentialStore(settings.credentials_path)
    if args.token:
        credentials.set_token(args.token)
    if args.company_id:
        credentials.set_company_id(args.company_id)

    client = BookingApiClient(credentials=credentials)
    service = DocumentsService(
        bookings_repository=BookingsRepository(client),
        agents_repository=AgentsRepository(client),
        users_repository=UsersRepository(client),
        settings=settings,
    )

    renderers = {
        "confirmation": service.render_confirmation,
        "invoice": service.render_invoice,
    }
    selected = list(renderers) if args.document == "both" else [args.document]
    os.makedirs(args.output_dir, exist_ok=True)
    written = []
    try:
        for name in selected:
            document = renderers[name](args.booking_id)
            path = os.path.join(args.output_dir, document.filename)
            with open(path, "wb") as output:
                output.write(document.content)
            written.append(path)
    except AppError as exc:
        print(json.dumps({"error": {"code": exc.code, "message": exc.message, "details": exc.details}}, indent=2))
        sys.exit(1)
    finally:
        if args.logout:
            credentials.clear_token()
    print(json.dumps({"bookingId": args.booking_id, "files": written}, indent=2))


if __name__ == "__main__":
    main()
