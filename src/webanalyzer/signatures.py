"""Technology signatures for pattern-based detection.

The table is plain data: each ``Signature`` names one technology and lists the
content patterns that identify it. Regex patterns are searched in the raw HTML
(case sensitivity is part of the pattern); plain string patterns are matched as
case-insensitive substrings. The table, the framework precedence rules, the
contextual boosts and the header rules are built once at import and never
mutated.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Pattern, Union

PatternLike = Union[Pattern[str], str]

FRAMEWORK_CATEGORIES = frozenset({"Web frameworks", "JavaScript frameworks"})


@dataclass(frozen=True)
class Signature:
    """Named rule describing how to recognise one technology in page HTML."""

    name: str
    patterns: tuple[PatternLike, ...]
    confidence: int
    categories: tuple[str, ...]
    version: Optional[Pattern[str]] = None
    exclude: tuple[Pattern[str], ...] = ()
    requires_all: bool = False

    def __post_init__(self):
        if not self.patterns:
            raise ValueError(f"Signature '{self.name}' has no patterns")
        if not self.categories:
            raise ValueError(f"Signature '{self.name}' has no categories")
        if not 0 <= self.confidence <= 100:
            raise ValueError(
                f"Signature '{self.name}' confidence must be 0-100, got {self.confidence}"
            )

    @property
    def is_framework(self) -> bool:
        return any(category in FRAMEWORK_CATEGORIES for category in self.categories)


@dataclass(frozen=True)
class HeaderRule:
    """Emit a technology when a response header contains a substring.

    An empty ``contains`` means the header only has to be present.
    """

    header: str
    contains: str
    name: str
    confidence: int
    categories: tuple[str, ...]

    def matches(self, headers: dict[str, str]) -> bool:
        value = headers.get(self.header)
        if value is None:
            return False
        return self.contains in str(value).lower()


def build_signature_table(entries: Iterable[Signature]) -> tuple[Signature, ...]:
    """Freeze signatures into a table, rejecting duplicate names."""
    table = tuple(entries)
    seen: set[str] = set()
    for signature in table:
        if signature.name in seen:
            raise ValueError(f"Duplicate signature name: {signature.name}")
        seen.add(signature.name)
    return table


def _sig(
    name: str,
    patterns: list[PatternLike],
    confidence: int,
    categories: list[str],
    version: Optional[Pattern[str]] = None,
    exclude: Optional[list[Pattern[str]]] = None,
    requires_all: bool = False,
) -> Signature:
    return Signature(
        name=name,
        patterns=tuple(patterns),
        confidence=confidence,
        categories=tuple(categories),
        version=version,
        exclude=tuple(exclude or ()),
        requires_all=requires_all,
    )


_re = re.compile

SIGNATURES: tuple[Signature, ...] = build_signature_table([
    # ===== Web / JavaScript frameworks (first pass) =====
    _sig(
        "Next.js",
        [_re(r"_next/"), _re(r"__NEXT_DATA__"), _re(r"_next/static"),
         _re(r"next/router"), _re(r"next/image")],
        95, ["Web frameworks"],
        version=_re(r"next\.js[/@ ]v?(\d+(?:\.\d+)+)", re.I),
        exclude=[_re(r"angular\.js", re.I), _re(r"vue\.js", re.I), _re(r"@angular/")],
    ),
    _sig(
        "Angular",
        [_re(r"@angular/"), _re(r"ng-version="), _re(r"angular(?:\.min)?\.js"),
         _re(r"\bng-(?:app|controller|model)\b"), _re(r"ng\.probe|angular\.module")],
        95, ["Web frameworks"],
        version=_re(r'ng-version="([\d.]+)"'),
    ),
    _sig(
        "Vue.js",
        [_re(r"vue(?:\.min)?\.js"), _re(r"__VUE__"), _re(r"Vue\.component|new Vue\("),
         _re(r"\bv-(?:if|for|bind|model)="), _re(r"data-v-[0-9a-f]{8}")],
        90, ["Web frameworks"],
        version=_re(r"vue@(\d+(?:\.\d+)+)"),
        exclude=[_re(r"_next/")],
    ),
    _sig(
        "Svelte",
        [_re(r"svelte", re.I), _re(r"svelte\.js"), _re(r"svelte-[a-z0-9]{6}"),
         _re(r"__sveltekit")],
        95, ["Web frameworks"],
        exclude=[_re(r"_next/")],
    ),
    _sig("Nuxt.js", ["/_nuxt/", "__NUXT__", "nuxt-link"], 95, ["Web frameworks"]),
    _sig("Alpine.js", ["alpinejs", "x-data=", "x-init="], 85, ["JavaScript frameworks"]),

    # ===== JavaScript libraries =====
    _sig(
        "React",
        [_re(r"react\.development\.js"), _re(r"react\.production\.min\.js"),
         _re(r"react-dom"), _re(r"ReactDOM\.(?:render|createRoot|hydrate)"),
         _re(r"React\.createElement|data-reactroot")],
        90, ["JavaScript libraries"],
        version=_re(r"react(?:-dom)?@(\d+(?:\.\d+)+)"),
        exclude=[_re(r"_next/")],
    ),
    _sig(
        "jQuery",
        [_re(r"jquery", re.I), _re(r"jquery\.js"), _re(r"\$\.fn\.jquery"), _re(r"jQuery")],
        85, ["JavaScript libraries"],
        version=_re(r"jquery[.-]?(\d+\.\d+(?:\.\d+)?)(?:\.min)?\.js", re.I),
    ),
    _sig("Lodash", [_re(r"lodash", re.I), _re(r"lodash\.js"), _re(r"_\.VERSION"), _re(r"_\.map")],
         80, ["JavaScript libraries"]),
    _sig("Axios", [_re(r"axios", re.I), _re(r"axios\.js"), _re(r"axios\.min\.js")],
         85, ["JavaScript libraries"]),
    _sig("Three.js", [_re(r"three\.js"), _re(r"three\.min\.js"), _re(r"THREE\.")],
         90, ["JavaScript libraries"]),
    _sig("Framer Motion", [_re(r"framer-motion"), _re(r"motion/"), _re(r"animate\(")],
         85, ["JavaScript libraries"]),
    _sig("GSAP", [_re(r"gsap", re.I), _re(r"TweenMax"), _re(r"TimelineMax")],
         90, ["JavaScript libraries"]),
    _sig("HTMX", ["htmx.org", "htmx.min.js", "hx-get=", "hx-post=", "hx-target="],
         85, ["JavaScript libraries"]),
    _sig("Turbo", ["@hotwired/turbo", "turbo-frame", "data-turbo", "turbo.es2017"],
         85, ["JavaScript libraries"]),

    # ===== CSS and UI frameworks =====
    _sig(
        "Tailwind CSS",
        [_re(r"tailwindcss", re.I), _re(r"tailwind\.css"),
         _re(r'class="[^"]*(?:bg-|text-|p-|m-|flex|grid|w-|h-)'), _re(r"tw-")],
        85, ["CSS frameworks"],
    ),
    _sig(
        "Bootstrap",
        [_re(r"bootstrap", re.I), _re(r"bootstrap\.css"), _re(r"btn btn-"),
         _re(r"container-fluid"), _re(r'class="[^"]*(?:col-|row|btn-|card|navbar)')],
        80, ["CSS frameworks"],
        version=_re(r"bootstrap@(\d+(?:\.\d+)+)"),
    ),
    _sig(
        "Bulma",
        [_re(r"bulma", re.I), _re(r"bulma\.css"),
         _re(r'class="[^"]*(?:columns|column|button|notification)')],
        80, ["CSS frameworks"],
    ),
    _sig("Material-UI", [_re(r"@mui/"), _re(r"material-ui"), _re(r"makeStyles")],
         85, ["UI frameworks"]),
    _sig("Ant Design", [_re(r"antd"), _re(r"ant-design"), _re(r"\.ant-")],
         85, ["UI frameworks"]),
    _sig("Chakra UI", [_re(r"@chakra-ui"), _re(r"chakra-ui")], 90, ["UI frameworks"]),

    # ===== Build tools =====
    _sig("Webpack", [_re(r"webpackJsonp"), _re(r"webpack_require"), _re(r"__webpack_")],
         90, ["Development tools"]),
    _sig("Vite", [_re(r"@vite/"), _re(r"vite\.js"), _re(r"__vite__")],
         90, ["Development tools"]),

    # ===== Analytics =====
    _sig(
        "Google Analytics",
        [_re(r"google-analytics\.com"), _re(r"gtag\("), _re(r"\bga\("),
         _re(r"UA-\d+-\d+"), _re(r"\bG-[A-Z0-9]{6,}\b")],
        95, ["Analytics"],
    ),
    _sig(
        "Google Tag Manager",
        [_re(r"googletagmanager\.com"), _re(r"GTM-[A-Z0-9]+"), _re(r"gtm\.js"), _re(r"_gtm")],
        95, ["Analytics"],
    ),
    _sig("Facebook Pixel", [_re(r"fbevents\.js"), _re(r"facebook\.net/tr"), _re(r"fbq\(")],
         95, ["Analytics"]),
    _sig("Hotjar", [_re(r"hotjar", re.I), _re(r"static\.hotjar\.com"), _re(r"hjid")],
         95, ["Analytics"]),

    # ===== CDN =====
    _sig(
        "Cloudflare",
        [_re(r"cloudflare", re.I), _re(r"cf-ray", re.I), _re(r"cdnjs\.cloudflare\.com"),
         _re(r"__cf_bm")],
        90, ["CDN"],
    ),
    _sig("jsDelivr", [_re(r"jsdelivr\.net"), _re(r"cdn\.jsdelivr\.net")], 95, ["CDN"]),
    _sig("unpkg", [_re(r"unpkg\.com")], 95, ["CDN"]),

    # ===== CMS =====
    _sig(
        "WordPress",
        [_re(r"wp-(?:content|includes|json|admin)/|<meta[^>]+generator[^>]+wordpress", re.I)],
        95, ["CMS"],
        version=_re(r'content="WordPress (\d+(?:\.\d+)*)"'),
    ),
    _sig(
        "Drupal",
        [_re(r"drupal", re.I), _re(r"sites/default/files"), _re(r"misc/drupal")],
        95, ["CMS"],
        version=_re(r'content="Drupal (\d+)'),
    ),
    _sig(
        "Joomla",
        [_re(r"joomla", re.I), _re(r"components/com_"), _re(r"modules/mod_")],
        95, ["CMS"],
        version=_re(r'content="Joomla! (\d+(?:\.\d+)*)'),
    ),

    # ===== Ecommerce =====
    _sig(
        "Shopify",
        [_re(r"shopify", re.I), _re(r"cdn\.shopify\.com"), _re(r"myshopify\.com"),
         _re(r"Shopify\.shop")],
        95, ["Ecommerce"],
    ),
    _sig(
        "WooCommerce",
        [_re(r"woocommerce", re.I), _re(r"wc-"), _re(r"wp-content/plugins/woocommerce")],
        95, ["Ecommerce"],
    ),

    # ===== Marketing automation =====
    _sig("HubSpot", ["js.hs-scripts.com", "hs-analytics", "hbspt", "_hsq"],
         90, ["Marketing automation"]),
    _sig("Mailchimp", ["chimpstatic.com", "list-manage.com", "mc-embedded-subscribe"],
         90, ["Marketing automation"]),

    # ===== Hosting & PaaS =====
    _sig("Vercel", [_re(r"vercel", re.I), _re(r"x-vercel", re.I), _re(r"\.vercel\.app"),
                    _re(r"__vercel")],
         90, ["PaaS"]),
    _sig("Netlify", [_re(r"netlify", re.I), _re(r"\.netlify\.app"), _re(r"x-nf-", re.I),
                     _re(r"__netlify")],
         90, ["PaaS"]),
    _sig("GitHub Pages", [_re(r"\.github\.io"), _re(r"github\.com")], 80, ["PaaS"]),

    # ===== Security =====
    _sig("reCAPTCHA", [_re(r"recaptcha", re.I), _re(r"google\.com/recaptcha"),
                       _re(r"g-recaptcha")],
         95, ["Security"]),
])

# Detected framework -> names suppressed for the rest of the run
FRAMEWORK_PRECEDENCE: dict[str, tuple[str, ...]] = {
    "Next.js": ("React",),
    "Angular": ("React", "Vue.js", "Next.js"),
}

# (boosted technology, framework that must be detected, points added)
CONTEXTUAL_BOOSTS: tuple[tuple[str, str, float], ...] = (
    ("Tailwind CSS", "Next.js", 10),
    ("Vercel", "Next.js", 15),
)

HEADER_RULES: tuple[HeaderRule, ...] = (
    # Web servers
    HeaderRule("server", "nginx", "Nginx", 95, ("Web servers",)),
    HeaderRule("server", "apache", "Apache", 95, ("Web servers",)),
    HeaderRule("server", "microsoft-iis", "Microsoft IIS", 95, ("Web servers",)),
    HeaderRule("server", "litespeed", "LiteSpeed", 95, ("Web servers",)),
    HeaderRule("server", "openresty", "OpenResty", 95, ("Web servers",)),
    HeaderRule("server", "caddy", "Caddy", 95, ("Web servers",)),
    HeaderRule("server", "cloudflare", "Cloudflare", 95, ("CDN",)),
    # Frameworks and languages
    HeaderRule("x-powered-by", "express", "Express", 90, ("Web frameworks",)),
    HeaderRule("x-powered-by", "php", "PHP", 90, ("Programming languages",)),
    HeaderRule("x-powered-by", "asp.net", "ASP.NET", 90, ("Web frameworks",)),
    HeaderRule("x-powered-by", "next.js", "Next.js", 90, ("Web frameworks",)),
    # CDN and hosting
    HeaderRule("cf-ray", "", "Cloudflare", 95, ("CDN",)),
    HeaderRule("x-served-by", "fastly", "Fastly", 90, ("CDN",)),
    HeaderRule("x-cache", "cloudfront", "Amazon CloudFront", 90, ("CDN",)),
    HeaderRule("x-vercel-id", "", "Vercel", 95, ("PaaS",)),
    HeaderRule("x-nf-request-id", "", "Netlify", 95, ("PaaS",)),
)

# Category -> legacy bucket; unmapped categories are left out of the legacy view
LEGACY_CATEGORY_MAP: dict[str, str] = {
    "Web frameworks": "frameworks",
    "JavaScript frameworks": "frameworks",
    "JavaScript libraries": "libraries",
    "CMS": "cms",
    "Analytics": "analytics",
    "CDN": "cdn",
    "Web servers": "servers",
    "PaaS": "servers",
    "Programming languages": "languages",
    "Databases": "databases",
    "Ecommerce": "ecommerce",
    "Marketing automation": "marketing",
}
