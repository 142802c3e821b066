"""Public marketing pages: landing, about and contact."""
from __future__ import annotations

from datetime import date
from html import escape

from fastapi import APIRouter
from fastapi.responses import HTMLResponse, Response

from ..core.config import settings

router = APIRouter()

STYLE = """
    :root { --primary: #1e3a5f; --secondary: #e07a2f; --muted: #f3f5f8; --text: #1f2933; }
    * { box-sizing: border-box; }
    body { margin: 0; font-family: system-ui, -apple-system, "Segoe UI", sans-serif; color: var(--text); }
    nav { display: flex; justify-content: space-between; align-items: center; padding: 1rem 2rem; background: #fff; border-bottom: 1px solid #e5e7eb; }
    nav a { color: var(--primary); text-decoration: none; margin-left: 1.25rem; font-weight: 500; }
    nav .brand { font-weight: 700; font-size: 1.2rem; margin-left: 0; }
    .hero { background: linear-gradient(135deg, var(--primary), #2d5a8a); color: #fff; padding: 5rem 2rem; text-align: center; }
    .hero h1 { font-size: 2.75rem; margin: 0 0 1rem; }
    .hero p { font-size: 1.3rem; opacity: 0.9; margin: 0 0 2rem; }
    .button { display: inline-block; padding: 0.8rem 1.6rem; border-radius: 6px; text-decoration: none; font-weight: 600; margin: 0.25rem; }
    .button.primary { background: var(--secondary); color: #fff; }
    .button.outline { border: 2px solid #fff; color: #fff; }
    section { padding: 4rem 2rem; max-width: 1100px; margin: 0 auto; }
    section h2 { text-align: center; color: var(--primary); font-size: 2rem; }
    .grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(220px, 1fr)); gap: 1.5rem; }
    .card { background: var(--muted); border-radius: 10px; padding: 1.5rem; text-align: center; }
    .card h3 { margin-top: 0; color: var(--primary); }
    .cta { background: var(--muted); text-align: center; max-width: none; }
    footer { background: var(--primary); color: #fff; text-align: center; padding: 2rem; }
    footer p { margin: 0.25rem 0; opacity: 0.85; }
"""

FEATURES = (
    ("Quality Properties", "Carefully curated rental properties that meet the highest standards"),
    ("Secure Process", "Your information and transactions are protected every step of the way"),
    ("Fast &amp; Easy", "Streamlined process gets you into your new home quickly"),
    ("Expert Support", "Dedicated team ready to assist you throughout your rental journey"),
)

MISSION = (
    ("Our Purpose", "To simplify the rental process and connect people with homes that truly fit their lives"),
    ("Our Values", "Trust, transparency, and exceptional service guide everything we do"),
    ("Our Vision", "To be the most trusted name in rental solutions, known for innovation and care"),
)

WHO_WE_ARE = (
    "{brand} is more than just a rental service: we're your partner in finding the perfect home. "
    "With years of experience in the real estate and rental industry, we understand that finding the "
    "right place to live is about more than just four walls and a roof.",
    "Our team of dedicated professionals works tirelessly to ensure that every client receives personalized "
    "attention and expert guidance throughout their rental journey. We believe in building lasting "
    "relationships based on trust, integrity, and exceptional service.",
    "At Apex, we're committed to making the rental process smooth, transparent, and stress-free. Whether "
    "you're looking for your first apartment or upgrading to a larger space, we're here to help you every "
    "step of the way.",
)


def _cards(items: tuple[tuple[str, str], ...]) -> str:
    return "\n".join(f'<div class="card"><h3>{title}</h3><p>{text}</p></div>' for title, text in items)


def render_page(title: str, body: str) -> str:
    """Wrap page content in the shared head, navbar and footer."""

    brand = escape(settings.app_name)
    login_url = escape(settings.login_url)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>{escape(title)} | {brand}</title>
    <style>{STYLE}</style>
</head>
<body>
    <nav>
        <a class="brand" href="/">{brand}</a>
        <div>
            <a href="/">Home</a>
            <a href="/about">About</a>
            <a href="/contact">Contact</a>
            <a href="{login_url}">Client Login</a>
        </div>
    </nav>
    <main>
{body}
    </main>
    <footer>
        <p><strong>{brand}</strong></p>
        <p>bring your next home with confidence</p>
        <p>&copy; {date.today().year} {brand}. All rights reserved.</p>
    </footer>
</body>
</html>
"""


def landing_page() -> str:
    body = f"""
        <div class="hero">
            <h1>Bring Your Next Home With Confidence</h1>
            <p>Professional rental solutions that make finding and securing your perfect home effortless</p>
            <a class="button primary" href="/contact">Get Started Today</a>
            <a class="button outline" href="/about">Learn More</a>
        </div>
        <section>
            <h2>Why Choose Apex?</h2>
            <div class="grid">
{_cards(FEATURES)}
            </div>
        </section>
        <section class="cta">
            <h2>Ready to Find Your Perfect Home?</h2>
            <p>Join thousands of satisfied clients who found their ideal rental with Apex</p>
            <a class="button primary" href="/contact">Contact Us Today</a>
        </section>
"""
    return render_page("Home", body)


def about_page() -> str:
    brand = escape(settings.app_name)
    paragraphs = "\n".join(f"<p>{text.format(brand=brand)}</p>" for text in WHO_WE_ARE)
    body = f"""
        <div class="hero">
            <h1>About {brand}</h1>
            <p>Empowering people to find their perfect home with confidence and ease</p>
        </div>
        <section>
            <h2>Our Mission</h2>
            <div class="grid">
{_cards(MISSION)}
            </div>
        </section>
        <section>
            <h2>Who We Are</h2>
{paragraphs}
        </section>
"""
    return render_page("About", body)


def contact_page() -> str:
    email = escape(settings.contact_email)
    phone = escape(settings.contact_phone)
    body = f"""
        <div class="hero">
            <h1>Contact Us</h1>
            <p>Tell us what you are looking for and our team will get back to you</p>
        </div>
        <section>
            <div class="grid">
                <div class="card"><h3>Email</h3><p><a href="mailto:{email}">{email}</a></p></div>
                <div class="card"><h3>Phone</h3><p>{phone}</p></div>
                <div class="card"><h3>Clients</h3><p>Already renting with us? <a href="{escape(settings.login_url)}">Sign in to your dashboard</a></p></div>
            </div>
        </section>
"""
    return render_page("Contact", body)


@router.get("/", response_class=HTMLResponse, tags=["pages"])
async def index() -> HTMLResponse:
    """Serve the landing page."""

    return HTMLResponse(content=landing_page())


@router.head("/", tags=["pages"])
async def index_head() -> Response:
    """Fast health checks issue HEAD /; answer with 200 to avoid noisy 405s."""

    return Response(status_code=200)


@router.get("/about", response_class=HTMLResponse, tags=["pages"])
async def about() -> HTMLResponse:
    return HTMLResponse(content=about_page())


@router.get("/contact", response_class=HTMLResponse, tags=["pages"])
async def contact() -> HTMLResponse:
    return HTMLResponse(content=contact_page())
