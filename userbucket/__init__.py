"""
Userbucket API package.

A FastAPI service with two independent facades: CRUD over a MongoDB
``usuarios`` collection and pass-through operations on S3 buckets.
"""
