"""bestfit package: template parsing, derivative-free curve fitting and CLI."""

__all__ = [
    "config",
    "macros",
    "parser",
    "formula",
    "scoring",
    "optimizer",
    "auto",
    "formatting",
    "evaluator",
    "plotting",
    "cli",
    "types",
    "api",
    "logging_config",
]

# Public API exports

__api_exports__ = [
    "find_best_fit",
    "auto_find_best_fit",
    "build_eval_function",
    "sequential",
    "format_equation",
    "fit",
    "auto_fit",
    "validate_template",
    "evaluate",
    "plot_fit",
]
