"""Построение Go деклараций"""
