"""Crawler and sifter agents for web fact verification."""
