"""Installer steps for optional integrations"""
