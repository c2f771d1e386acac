"""Client runtime (app.js).

The runtime is fixed text; the only page-specific part is PAGE_CONFIG,
embedded as JSON with sorted keys so identical pages produce identical
scripts. Buttons carry their action in a data-action attribute, either as a
JSON object ({"type": "scroll_to", "target": "#pricing"}) or as a bare action
type, with per-instance action maps in PAGE_CONFIG.actions as a fallback.
"""

import json
from typing import Any, Dict, Iterable, Optional

from src.page_model.models import ComponentInstance, PageDefinition

from .seo import page_title

RUNTIME_TEMPLATE = """(function () {
  'use strict';

  var PAGE_CONFIG = __PAGE_CONFIG__;
  var fieldCache = {};

  function showToast(message, kind) {
    var container = document.getElementById('toast-container');
    if (!container) {
      container = document.createElement('div');
      container.id = 'toast-container';
      document.body.appendChild(container);
    }
    var toast = document.createElement('div');
    toast.className = 'lp-toast lp-toast--' + (kind || 'info');
    toast.setAttribute('role', 'status');
    toast.textContent = message;
    container.appendChild(toast);
    setTimeout(function () {
      if (toast.parentNode) { toast.parentNode.removeChild(toast); }
    }, 4000);
  }

  function trackEvent(name, data) {
    data = data || {};
    if (typeof window.trackFacebookEvent === 'function') { window.trackFacebookEvent(name, data); }
    if (typeof window.trackGoogleEvent === 'function') { window.trackGoogleEvent(name, data); }
    if (typeof window.clarity === 'function') { window.clarity('event', name); }
  }

  function findCheckoutForm(element, productId) {
    var section = element.closest('[data-component-id]');
    var selector = 'form[data-checkout-form]';
    if (productId) { selector = 'form[data-checkout-form][data-product-id="' + productId + '"]'; }
    return (section && section.querySelector(selector)) || document.querySelector(selector);
  }

  var ACTIONS = {
    scroll_to: function (action) {
      var target = action.target ? document.querySelector(action.target) : null;
      if (!target) { showToast('Section not found', 'error'); return; }
      target.scrollIntoView({behavior: 'smooth', block: 'start'});
    },
    open_link: function (action) {
      if (!action.url) { showToast('Link not configured', 'error'); return; }
      if (action.new_tab === false) { window.location.href = action.url; return; }
      window.open(action.url, '_blank', 'noopener');
    },
    checkout: function (action, element) {
      var form = findCheckoutForm(element, action.product_id);
      if (!form) { showToast('Checkout is not available', 'error'); return; }
      loadCheckoutFields(form);
      form.scrollIntoView({behavior: 'smooth', block: 'center'});
      trackEvent('InitiateCheckout', {content_ids: action.product_id ? [action.product_id] : []});
    },
    track_event: function (action) {
      trackEvent(action.event || 'custom_event', action.data);
    }
  };
  ACTIONS.external_link = ACTIONS.open_link;

  function resolveAction(element) {
    var raw = element.getAttribute('data-action');
    if (raw) {
      try {
        var parsed = JSON.parse(raw);
        if (parsed && typeof parsed === 'object') { return parsed; }
        if (typeof parsed === 'string') { raw = parsed; }
      } catch (e) {
        // bare action type
      }
    }
    var section = element.closest('[data-component-id]');
    var key = element.getAttribute('data-action-key');
    if (section && key) {
      var configured = (PAGE_CONFIG.actions[section.getAttribute('data-component-id')] || {})[key];
      if (configured && typeof configured === 'object') { return configured; }
    }
    return raw ? {type: raw} : null;
  }

  function handleAction(event) {
    var element = event.currentTarget;
    var action = resolveAction(element);
    if (!action || !ACTIONS[action.type]) { return; }
    event.preventDefault();
    try {
      ACTIONS[action.type](action, element);
    } catch (error) {
      console.error('Action failed', error);
      showToast('Something went wrong', 'error');
    }
  }

  function renderField(field) {
    var wrapper = document.createElement('label');
    wrapper.textContent = field.label || field.name;
    var input;
    if (field.type === 'select') {
      input = document.createElement('select');
      (field.options || []).forEach(function (option) {
        var item = document.createElement('option');
        item.value = option.value !== undefined ? option.value : option;
        item.textContent = option.label || option;
        input.appendChild(item);
      });
    } else if (field.type === 'textarea') {
      input = document.createElement('textarea');
    } else {
      input = document.createElement('input');
      input.type = field.type || 'text';
    }
    input.name = field.name;
    if (field.required) { input.required = true; }
    if (field.placeholder) { input.placeholder = field.placeholder; }
    wrapper.appendChild(input);
    return wrapper;
  }

  function loadCheckoutFields(form) {
    var productId = form.getAttribute('data-product-id');
    var container = form.querySelector('[data-checkout-fields]') || form;
    if (!PAGE_CONFIG.checkoutFieldsUrl || !productId || form.getAttribute('data-fields-loaded')) { return; }
    form.setAttribute('data-fields-loaded', 'true');
    var request = fieldCache[productId];
    if (!request) {
      var url = PAGE_CONFIG.checkoutFieldsUrl + '?product_id=' + encodeURIComponent(productId);
      request = fetch(url, {headers: {'Accept': 'application/json'}}).then(function (response) {
        if (!response.ok) { throw new Error('HTTP ' + response.status); }
        return response.json();
      });
      fieldCache[productId] = request;
    }
    request.then(function (payload) {
      var fields = Array.isArray(payload) ? payload : (payload.fields || []);
      fields.forEach(function (field) { container.appendChild(renderField(field)); });
    }).catch(function (error) {
      delete fieldCache[productId];
      form.removeAttribute('data-fields-loaded');
      console.error('Checkout fields unavailable', error);
      showToast('Could not load the checkout form', 'error');
    });
  }

  function handleSubmit(event) {
    event.preventDefault();
    var form = event.currentTarget;
    if (!form.checkValidity()) { form.reportValidity(); return; }
    trackEvent('Purchase', {content_ids: [form.getAttribute('data-product-id')]});
    showToast('Thank you! Your order has been received.', 'success');
    form.reset();
  }

  function bind(root) {
    root.querySelectorAll('[data-action]:not([data-bound])').forEach(function (element) {
      element.setAttribute('data-bound', 'true');
      element.addEventListener('click', handleAction);
    });
    root.querySelectorAll('form[data-checkout-form]:not([data-bound])').forEach(function (form) {
      form.setAttribute('data-bound', 'true');
      form.addEventListener('submit', handleSubmit);
      loadCheckoutFields(form);
    });
  }

  function init() {
    bind(document);
    if (PAGE_CONFIG.trackPageView) {
      trackEvent('page_view', {page_slug: PAGE_CONFIG.slug, page_title: PAGE_CONFIG.title});
    }
    if (typeof MutationObserver === 'function') {
      new MutationObserver(function (mutations) {
        mutations.forEach(function (mutation) {
          mutation.addedNodes.forEach(function (node) {
            if (node.nodeType === 1) { bind(node.parentNode || document); }
          });
        });
      }).observe(document.body, {childList: true, subtree: true});
    }
  }

  window.showToast = showToast;
  window.landingPageActions = ACTIONS;

  if (document.readyState === 'loading') {
    document.addEventListener('DOMContentLoaded', init);
  } else {
    init();
  }
})();
"""


def build_page_config(page: PageDefinition, components: Iterable[ComponentInstance],
                      checkout_fields_url: Optional[str] = None) -> Dict[str, Any]:
    return {
        "slug": page.slug,
        "title": page_title(page),
        "language": page.theme.language,
        "direction": page.theme.direction,
        "checkoutFieldsUrl": checkout_fields_url or "",
        "trackPageView": bool(page.tracking.track_page_view),
        "actions": {
            instance.id: instance.custom_actions
            for instance in components
            if instance.custom_actions
        },
    }


def build_runtime(page: PageDefinition, components: Iterable[ComponentInstance],
                  checkout_fields_url: Optional[str] = None) -> str:
    """Build app.js for a page."""
    config = build_page_config(page, components, checkout_fields_url)
    encoded = json.dumps(config, sort_keys=True, ensure_ascii=False, separators=(",", ":"))
    encoded = encoded.replace("</", "<\\/").replace("\u2028", "\\u2028").replace("\u2029", "\\u2029")
    return RUNTIME_TEMPLATE.replace("__PAGE_CONFIG__", encoded)
