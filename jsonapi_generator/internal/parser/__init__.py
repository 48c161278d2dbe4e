"""Загрузка OpenAPI документов"""
