"""Catalog and blob storage backends."""
