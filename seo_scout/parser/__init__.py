"""seo_scout.parser: HTML signal extraction, keywords and sitemap parsing."""
