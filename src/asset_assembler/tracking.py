"""Third-party tracking snippets.

Identifiers are validated before any snippet is emitted. An invalid
identifier never blocks the build: it is logged, reported as a warning and
replaced by an HTML comment.
"""

import logging
import re
from typing import List, Optional, Tuple

from src.page_model.models import TrackingConfig

logger = logging.getLogger(__name__)

FACEBOOK_PIXEL_PATTERN = re.compile(r"^\d{15,16}$")
GOOGLE_ANALYTICS_PREFIX = "G-"
CLARITY_MIN_LENGTH = 8
CLARITY_ID_PATTERN = re.compile(r"^[A-Za-z0-9]+$")


def is_valid_facebook_pixel_id(pixel_id: Optional[str]) -> bool:
    return bool(pixel_id) and FACEBOOK_PIXEL_PATTERN.match(pixel_id) is not None


def is_valid_google_analytics_id(ga_id: Optional[str]) -> bool:
    return bool(ga_id) and ga_id.startswith(GOOGLE_ANALYTICS_PREFIX) and re.match(r"^[A-Za-z0-9-]+$", ga_id) is not None


def is_valid_clarity_id(clarity_id: Optional[str]) -> bool:
    return (
        bool(clarity_id)
        and len(clarity_id) >= CLARITY_MIN_LENGTH
        and CLARITY_ID_PATTERN.match(clarity_id) is not None
    )


def _facebook_pixel(pixel_id: str, track_page_view: bool) -> str:
    page_view = "\n  fbq('track', 'PageView');" if track_page_view else ""
    return f"""<!-- Facebook Pixel -->
<script>
  !function(f,b,e,v,n,t,s)
  {{if(f.fbq)return;n=f.fbq=function(){{n.callMethod?
  n.callMethod.apply(n,arguments):n.queue.push(arguments)}};
  if(!f._fbq)f._fbq=n;n.push=n;n.loaded=!0;n.version='2.0';
  n.queue=[];t=b.createElement(e);t.async=!0;
  t.src=v;s=b.getElementsByTagName(e)[0];
  s.parentNode.insertBefore(t,s)}}(window, document,'script',
  'https://connect.facebook.net/en_US/fbevents.js');
  fbq('init', '{pixel_id}');{page_view}
  window.trackFacebookEvent = function(eventName, eventData) {{
    eventData = eventData || {{}};
    fbq('track', eventName, {{
      value: eventData.value || 0,
      currency: eventData.currency || 'USD',
      content_ids: eventData.content_ids || []
    }});
  }};
</script>
<noscript><img height="1" width="1" style="display:none" alt=""
  src="https://www.facebook.com/tr?id={pixel_id}&amp;ev=PageView&amp;noscript=1"></noscript>"""


def _google_analytics(ga_id: str) -> str:
    return f"""<!-- Google Analytics -->
<script async src="https://www.googletagmanager.com/gtag/js?id={ga_id}"></script>
<script>
  window.dataLayer = window.dataLayer || [];
  function gtag(){{dataLayer.push(arguments);}}
  gtag('js', new Date());
  gtag('config', '{ga_id}', {{page_title: document.title, page_location: window.location.href}});
  window.trackGoogleEvent = function(eventName, eventData) {{
    eventData = eventData || {{}};
    gtag('event', eventName, {{
      event_category: 'Landing Page',
      event_label: eventData.label || '',
      value: eventData.value || 0
    }});
  }};
</script>"""


def _clarity(clarity_id: str) -> str:
    return f"""<!-- Microsoft Clarity -->
<script>
  (function(c,l,a,r,i,t,y){{
    c[a]=c[a]||function(){{(c[a].q=c[a].q||[]).push(arguments)}};
    t=l.createElement(r);t.async=1;t.src="https://www.clarity.ms/tag/"+i;
    y=l.getElementsByTagName(r)[0];y.parentNode.insertBefore(t,y);
  }})(window, document, "clarity", "script", "{clarity_id}");
</script>"""


class TrackingScriptBuilder:
    """Builds the tracking block of the document head."""

    @staticmethod
    def build(tracking: TrackingConfig) -> Tuple[str, List[str]]:
        """Build tracking snippets for the configured identifiers.

        Args:
            tracking: Tracking configuration of the page

        Returns:
            Tuple of (head markup, warnings for dropped identifiers)
        """
        snippets: List[str] = []
        warnings: List[str] = []

        def _reject(label: str, value: str) -> None:
            message = f"Invalid {label} ID {value!r}; tracking snippet omitted"
            logger.warning(message)
            warnings.append(message)
            snippets.append(f"<!-- {label} ID invalid -->")

        if tracking.facebook_pixel_id:
            if is_valid_facebook_pixel_id(tracking.facebook_pixel_id):
                snippets.append(_facebook_pixel(tracking.facebook_pixel_id, tracking.track_page_view))
            else:
                _reject("Facebook Pixel", tracking.facebook_pixel_id)

        if tracking.google_analytics_id:
            if is_valid_google_analytics_id(tracking.google_analytics_id):
                snippets.append(_google_analytics(tracking.google_analytics_id))
            else:
                _reject("Google Analytics", tracking.google_analytics_id)

        if tracking.clarity_id:
            if is_valid_clarity_id(tracking.clarity_id):
                snippets.append(_clarity(tracking.clarity_id))
            else:
                _reject("Clarity", tracking.clarity_id)

        if not snippets:
            return "<!-- No tracking configuration -->", warnings
        return "\n".join(snippets), warnings
