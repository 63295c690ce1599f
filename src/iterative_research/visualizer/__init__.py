"""Visualizer package - Rich terminal views for research sessions."""

from .research_view import render_iteration_log, render_plan_tree, render_report

__all__ = [
	"render_iteration_log",
	"render_plan_tree",
	"render_report",
]
