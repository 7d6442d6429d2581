from flask import Blueprint, current_app, request
from flask_login import login_required, current_user

from mycolog.services import BatchService, StatsService, DateFilter, TimeRange
from mycolog.services.configs import get_user_configs
from mycolog.utils import parse_date

bp = Blueprint("stats", __name__)


@bp.route("/")
@login_required
def index():
    """Yield, contamination and pipeline statistics.

    Query args: range (ALL|YEAR|MONTH|WEEK|CUSTOM), start, end (CUSTOM only),
    species (config id or name).
    """
    time_range = request.args.get("range", TimeRange.ALL).upper()
    if time_range not in TimeRange.CHOICES:
        time_range = TimeRange.ALL

    try:
        date_filter = DateFilter(
            type=time_range,
            start_date=parse_date(request.args.get("start"), "start date"),
            end_date=parse_date(request.args.get("end"), "end date"),
        )
    except ValueError as exc:
        return {"error": str(exc)}, 400

    configs = get_user_configs(current_user.id)
    harvest = current_app.config["HARVEST_OPERATION"]

    batches = StatsService.filter_batches(
        BatchService.list_batches(current_user.id),
        date_filter,
        species_id=request.args.get("species") or None,
        species_configs=configs["species"],
    )
    pipeline = StatsService.get_pipeline_stats(batches, harvest, configs["statuses"])

    return {
        "range": time_range,
        "batchCount": len(batches),
        "yield": StatsService.get_yield_stats(batches, harvest),
        "health": StatsService.get_health_stats(batches, configs["statuses"]),
        "pipeline": {
            "activeCount": pipeline["activeCount"],
            "byStage": {
                stage: [b.to_dict() for b in members]
                for stage, members in pipeline["byStage"].items()
            },
        },
    }
