"""Модели OpenAPI документа и Go кода"""
