#!/usr/bin/env python3
"""
Data repair script for posts whose group has drifted out of step.

This script:
1. Checks every post against its paired group
2. Reports missing groups, broken links, admin and member mismatches
3. Repairs them with the post as the source of truth

Usage:
    python fix_membership_drift.py [--dry-run]
"""

import sys
import argparse
from pathlib import Path

# Add the backend directory to Python path
sys.path.insert(0, str(Path(__file__).parent))

from sqlmodel import Session, select, func
from trailmate.core.database import engine
from trailmate.models.post import Post
from trailmate.services.consistency import repair_all


def fix_membership_drift(dry_run: bool = False) -> dict:
    """
    Find and repair broken post/group pairings.

    Args:
        dry_run: If True, only report issues without making changes

    Returns:
        Statistics dictionary
    """
    stats = {
        "total_posts": 0,
        "drifted_posts": 0,
        "repaired_posts": 0,
        "changes": [],
    }

    with Session(engine) as session:
        stats["total_posts"] = session.exec(select(func.count(Post.id))).first() or 0
        print(f"🔍 Checking {stats['total_posts']} posts")
        print("=" * 60)

        drifts = repair_all(session, dry_run=dry_run)
        stats["drifted_posts"] = len(drifts)

        for drift in drifts:
            stats["changes"].append(
                {"post_id": str(drift.post_id), "title": drift.title, "problems": drift.problems}
            )
            print(f"📊 {drift.title[:30]:30} | {'; '.join(drift.problems)}")

        if not dry_run:
            stats["repaired_posts"] = len(drifts)
            print(f"✅ Repaired {stats['repaired_posts']} posts")
        else:
            print(f"🔍 DRY RUN: Would repair {stats['drifted_posts']} posts")

    return stats


def print_summary(stats: dict, dry_run: bool):
    """Print summary of the repair run."""
    print("\n" + "=" * 60)
    print("📈 SUMMARY")
    print("=" * 60)
    print(f"Total posts:         {stats['total_posts']:6d}")
    print(f"Drifted posts:       {stats['drifted_posts']:6d}")
    print(f"Repaired posts:      {stats['repaired_posts']:6d}")

    if dry_run and stats["drifted_posts"]:
        print("\n🔍 This was a DRY RUN. Run without --dry-run to apply changes.")


def main():
    parser = argparse.ArgumentParser(description="Repair post/group membership drift")
    parser.add_argument("--dry-run", action="store_true",
                        help="Only report issues, don't make changes")

    args = parser.parse_args()

    print("🔧 Post/Group Repair Tool")
    print(f"Mode: {'DRY RUN' if args.dry_run else 'LIVE UPDATE'}")
    print()

    if engine is None:
        print("❌ Database is not available")
        sys.exit(1)

    try:
        stats = fix_membership_drift(dry_run=args.dry_run)
        print_summary(stats, args.dry_run)
    except Exception as e:
        print(f"❌ Error during repair: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
