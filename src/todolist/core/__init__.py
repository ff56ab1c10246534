"""Core configuration and cross-cutting helpers for the todo list service."""
