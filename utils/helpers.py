# Utility functions for the tagging demo

from typing import Dict, Any
import json


def save_json(data: Dict[str, Any], filepath: str):
    """Save data to JSON file"""
    with open(filepath, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    print(f"✓ Data saved to {filepath}")


def print_section(title: str):
    """Print a formatted section header"""
    print(f"\n{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}")


def print_subsection(title: str):
    """Print a formatted subsection header"""
    print(f"\n{'-'*60}")
    print(f"  {title}")
    print(f"{'-'*60}")


def format_scores(scores) -> str:
    """One 'name: score' line per entry"""
    rows = [s.to_dict() for s in scores]
    return "\n".join(f"  {r['name']}: {r['score']:.4f}" for r in rows) or "  (none)"
