"""
Leaderboard Service
Top learners by XP, all-time or over a recent period.
"""
from datetime import datetime, timedelta, timezone

from sqlalchemy import func

from habitat_app.core.exceptions import ValidationError
from habitat_app.extensions import db
from habitat_app.models import User, XpLog

TIMEFRAMES = ('all_time', 'week', 'month')


class LeaderboardService:

    @staticmethod
    def get_leaderboard(timeframe='all_time', limit=20):
        """
        Top learners by XP.
        timeframe: 'all_time', 'week', 'month'
        """
        if timeframe not in TIMEFRAMES:
            raise ValidationError(
                f"Unknown timeframe '{timeframe}'", errors={'timeframe': list(TIMEFRAMES)}
            )

        if timeframe == 'all_time':
            users = User.query.filter(User.total_xp > 0)\
                .order_by(User.total_xp.desc(), User.user_id.asc())\
                .limit(limit).all()
            return [
                {
                    'rank': index,
                    'user_id': u.user_id,
                    'username': u.username,
                    'xp': u.total_xp or 0,
                } for index, u in enumerate(users, start=1)
            ]

        now = datetime.now(timezone.utc)
        start_date = now - (timedelta(weeks=1) if timeframe == 'week' else timedelta(days=30))

        period_xp = func.sum(XpLog.xp_change).label('period_xp')
        results = db.session.query(User.user_id, User.username, period_xp)\
            .join(XpLog, User.user_id == XpLog.user_id)\
            .filter(XpLog.timestamp >= start_date)\
            .group_by(User.user_id, User.username)\
            .order_by(period_xp.desc(), User.user_id.asc())\
            .limit(limit).all()

        return [
            {
                'rank': index,
                'user_id': r.user_id,
                'username': r.username,
                'xp': int(r.period_xp or 0),
            } for index, r in enumerate(results, start=1)
        ]
