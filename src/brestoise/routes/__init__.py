"""HTTP routes, one router per endpoint family."""

from brestoise.routes import about, admin, drafts, gallery, inbox, leads, publish, status, testimonials

ROUTERS = [
    gallery.router,
    leads.router,
    testimonials.router,
    inbox.router,
    about.router,
    admin.router,
    drafts.router,
    publish.router,
    status.router,
]

__all__ = ["ROUTERS"]
