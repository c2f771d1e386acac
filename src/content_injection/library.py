"""Built-in component templates.

Used when the store hands over a ComponentVariation without template text.
Each entry declares the content fields and image slots it expects so the
engine can check hooks the same way it does for store-supplied templates.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class LibraryTemplate:
    source: str
    required_fields: Tuple[str, ...] = ()
    required_images: int = 0


HERO_1 = """\
<section class="lp-hero lp-hero--split" data-element="container">
  <div class="lp-container lp-grid lp-grid--2">
    <div class="lp-hero__text" data-element="leftContent">
      {{#visibility.badge}}<span class="lp-badge" data-element="badge">{{content.badge|Best Seller}}</span>{{/visibility.badge}}
      {{#visibility.headline}}<h1 class="lp-hero__headline" data-element="headline">{{content.headline|Your Headline Here}}</h1>{{/visibility.headline}}
      {{#visibility.subheadline}}<p class="lp-hero__subheadline" data-element="subheadline">{{content.subheadline|Your subheadline here}}</p>{{/visibility.subheadline}}
      {{#visibility.price}}
      <div class="lp-price" data-element="priceContainer">
        <span class="lp-price__current" data-element="price">{{content.price|0}} {{content.currency|DT}}</span>
        <span class="lp-price__original" data-element="originalPrice">{{content.originalPrice}}</span>
      </div>
      {{/visibility.price}}
      <div class="lp-buttons" data-element="buttonsContainer">
        {{#visibility.ctaButton}}<button type="button" class="lp-button lp-button--primary" data-element="ctaButton" data-action="{{customActions.cta}}">{{content.ctaText|Get Started}}</button>{{/visibility.ctaButton}}
        {{#visibility.secondaryButton}}<button type="button" class="lp-button lp-button--outline" data-element="secondaryButton" data-action="{{customActions.secondary}}">{{content.secondaryButtonText|Learn More}}</button>{{/visibility.secondaryButton}}
      </div>
    </div>
    {{#visibility.productImage}}
    <div class="lp-hero__media" data-element="rightContent">
      <img class="lp-hero__image" data-element="productImage" src="{{mediaUrls.productImage}}" alt="{{content.headline|Product}}" loading="lazy">
    </div>
    {{/visibility.productImage}}
    {{#editor}}<div class="lp-editor-overlay" data-editor-only="true">Click an element to edit it</div>{{/editor}}
  </div>
</section>
"""

HERO_2 = """\
<section class="lp-hero lp-hero--centered" data-element="container">
  <div class="lp-container lp-text-center">
    {{#visibility.headline}}<h1 class="lp-hero__headline" data-element="headline">{{content.headline|Your Headline Here}}</h1>{{/visibility.headline}}
    {{#visibility.subheadline}}<p class="lp-hero__subheadline" data-element="subheadline">{{content.subheadline|Your subheadline here}}</p>{{/visibility.subheadline}}
    {{#visibility.ctaButton}}<button type="button" class="lp-button lp-button--primary" data-element="ctaButton" data-action="{{customActions.cta}}">{{content.ctaText|Get Started}}</button>{{/visibility.ctaButton}}
    {{#visibility.backgroundImage}}<img class="lp-hero__backdrop" data-element="backgroundImage" src="{{mediaUrls.backgroundImage}}" alt="" loading="lazy">{{/visibility.backgroundImage}}
  </div>
</section>
"""

FEATURE_ITEM = """\
      <div class="lp-card lp-feature" data-element="featureCard">
        {{#visibility.icons}}<div class="lp-feature__icon" data-element="iconContainer">{{content.features.%(i)d.icon|*}}</div>{{/visibility.icons}}
        <h3 class="lp-feature__title" data-element="featureTitle">{{content.features.%(i)d.title|Feature %(n)d}}</h3>
        <p class="lp-feature__description" data-element="featureDescription">{{content.features.%(i)d.description|Feature description here}}</p>
      </div>
"""

FEATURES_1 = """\
<section class="lp-features" data-element="container">
  <div class="lp-container">
    {{#visibility.sectionTitle}}<h2 class="lp-section-title" data-element="sectionTitle">{{content.sectionTitle|Why Choose Us}}</h2>{{/visibility.sectionTitle}}
    {{#visibility.description}}<p class="lp-section-description" data-element="description">{{content.description|Discover the features that make us different}}</p>{{/visibility.description}}
    <div class="lp-grid lp-grid--3" data-element="grid">
""" + "".join(FEATURE_ITEM % {"i": i, "n": i + 1} for i in range(3)) + """\
    </div>
  </div>
</section>
"""

CTA_1 = """\
<section class="lp-cta" data-element="container">
  <div class="lp-container">
    <div class="lp-card lp-cta__card" data-element="card">
      {{#visibility.headline}}<h2 class="lp-cta__headline" data-element="headline">{{content.headline|Ready to Get Started?}}</h2>{{/visibility.headline}}
      {{#visibility.subheadline}}<p class="lp-cta__subheadline" data-element="subheadline">{{content.subheadline|Join thousands of satisfied customers}}</p>{{/visibility.subheadline}}
      {{#visibility.ctaButton}}<button type="button" class="lp-button lp-button--primary" data-element="ctaButton" data-action="{{customActions.cta}}">{{content.ctaText|Get Started Now}}</button>{{/visibility.ctaButton}}
      {{#visibility.checkoutForm}}<form class="lp-checkout-form" data-element="checkoutForm" data-product-id="{{content.productId}}" data-checkout-form="true"></form>{{/visibility.checkoutForm}}
    </div>
  </div>
</section>
"""

TESTIMONIAL_ITEM = """\
      <figure class="lp-card lp-testimonial" data-element="testimonialCard">
        <blockquote class="lp-testimonial__quote">{{content.testimonials.%(i)d.quote|Amazing service!}}</blockquote>
        <figcaption class="lp-testimonial__author">{{content.testimonials.%(i)d.name|Happy Customer}} <span class="lp-testimonial__role">{{content.testimonials.%(i)d.role}}</span></figcaption>
      </figure>
"""

TESTIMONIALS_1 = """\
<section class="lp-testimonials" data-element="container">
  <div class="lp-container">
    {{#visibility.sectionTitle}}<h2 class="lp-section-title" data-element="sectionTitle">{{content.sectionTitle|What Our Customers Say}}</h2>{{/visibility.sectionTitle}}
    <div class="lp-grid lp-grid--3" data-element="grid">
""" + "".join(TESTIMONIAL_ITEM % {"i": i} for i in range(3)) + """\
    </div>
  </div>
</section>
"""

PRICING_ITEM = """\
      <div class="lp-card lp-plan" data-element="planCard">
        <h3 class="lp-plan__name">{{content.plans.%(i)d.name|Plan %(n)d}}</h3>
        <p class="lp-plan__price">{{content.plans.%(i)d.price|0}} {{content.plans.%(i)d.currency|USD}}</p>
        <p class="lp-plan__features">{{content.plans.%(i)d.summary}}</p>
      </div>
"""

PRICING_1 = """\
<section class="lp-pricing" data-element="container">
  <div class="lp-container">
    {{#visibility.sectionTitle}}<h2 class="lp-section-title" data-element="sectionTitle">{{content.sectionTitle|Simple Pricing}}</h2>{{/visibility.sectionTitle}}
    <div class="lp-grid lp-grid--3" data-element="grid">
""" + "".join(PRICING_ITEM % {"i": i, "n": i + 1} for i in range(3)) + """\
    </div>
    {{#visibility.ctaButton}}<button type="button" class="lp-button lp-button--primary" data-element="ctaButton" data-action="{{customActions.cta}}">{{content.ctaText|Choose a Plan}}</button>{{/visibility.ctaButton}}
  </div>
</section>
"""

FAQ_ITEM = """\
      <details class="lp-faq__item" data-element="faqItem">
        <summary class="lp-faq__question">{{content.faqs.%(i)d.question|Question %(n)d}}</summary>
        <p class="lp-faq__answer">{{content.faqs.%(i)d.answer}}</p>
      </details>
"""

FAQ_1 = """\
<section class="lp-faq" data-element="container">
  <div class="lp-container lp-narrow">
    {{#visibility.sectionTitle}}<h2 class="lp-section-title" data-element="sectionTitle">{{content.sectionTitle|Frequently Asked Questions}}</h2>{{/visibility.sectionTitle}}
""" + "".join(FAQ_ITEM % {"i": i, "n": i + 1} for i in range(4)) + """\
  </div>
</section>
"""

TEMPLATE_LIBRARY: Dict[Tuple[str, int], LibraryTemplate] = {
    ("hero", 1): LibraryTemplate(HERO_1, ("headline", "subheadline", "ctaText"), 1),
    ("hero", 2): LibraryTemplate(HERO_2, ("headline", "subheadline", "ctaText")),
    ("features", 1): LibraryTemplate(FEATURES_1, ("sectionTitle", "features")),
    ("cta", 1): LibraryTemplate(CTA_1, ("headline", "ctaText")),
    ("testimonials", 1): LibraryTemplate(TESTIMONIALS_1, ("sectionTitle", "testimonials")),
    ("pricing", 1): LibraryTemplate(PRICING_1, ("sectionTitle", "plans")),
    ("faq", 1): LibraryTemplate(FAQ_1, ("sectionTitle", "faqs")),
}


def lookup_template(component_type: str, variation_number: int) -> Optional[LibraryTemplate]:
    return TEMPLATE_LIBRARY.get((component_type, variation_number))
