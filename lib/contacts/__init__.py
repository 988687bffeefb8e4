"""Contact discovery for business websites.

Layers:
  1. Email extraction (regex over raw page text)
  2. Website scraping (landing page + contact/about/support pages, mailto links)
  3. MX validation (disposable-domain filter + DNS mail-exchange lookup)
"""
