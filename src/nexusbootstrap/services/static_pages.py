"""Default corporate/legal page provisioning."""

import uuid
from typing import Any, Dict, Iterable

from nexusbootstrap.catalogs import STATIC_PAGES
from nexusbootstrap.models import StaticPage, utc_now


class StaticPageSeeder:
    def __init__(self, database, logger, console, pages: Iterable[StaticPage] = STATIC_PAGES):
        self.database = database
        self.logger = logger
        self.console = console
        self.pages = tuple(pages)

    def initialize_default_pages(self) -> Dict[str, Any]:
        """Insert one page per missing page type. Edited pages are never overwritten."""
        self.console.print("[yellow]Provisioning default corporate pages...[/yellow]")
        details: Dict[str, Any] = {"created": [], "existing": []}
        now = utc_now()

        with self.database.transaction() as conn:
            for page in self.pages:
                row = conn.execute(
                    "SELECT id FROM static_pages WHERE page_type = ?",
                    (page.page_type,),
                ).fetchone()
                if row is not None:
                    details["existing"].append(page.page_type)
                    continue
                conn.execute(
                    """
                    INSERT INTO static_pages (
                        id, page_type, title, content, is_active, meta_title,
                        meta_description, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        str(uuid.uuid4()),
                        page.page_type,
                        page.title,
                        page.content,
                        int(page.is_active),
                        page.meta_title,
                        page.meta_description,
                        now,
                        now,
                    ),
                )
                details["created"].append(page.page_type)

        for page_type in details["created"]:
            self.logger.info("Created default page %s.", page_type)
        return details
