"""
Core domain models, curve arithmetic, feed contracts and logging.

This module contains the foundational building blocks that are independent
of storage backends and event sources.
"""
