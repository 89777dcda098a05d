"""Scaffolding engine: command execution, run state and the step pipeline"""
