from __future__ import annotations

import csv
import io

from flask import Flask, jsonify, request

from ..common.auth import roles_required
from ..common.validators import require_int
from ..container import Container
from .service import CSV_FIELDS


def register(app: Flask, container: Container) -> None:
    admin_only = roles_required(container)
    service = container.report_service

    def _period_arg():
        raw = request.args.get("period")
        return require_int(raw, "period") if raw not in (None, "") else None

    @app.route("/api/admin/hour-log", methods=["GET"], endpoint="admin_hour_log")
    @admin_only
    def admin_hour_log():
        return jsonify(service.build(period=_period_arg()).to_dict())

    @app.route("/api/admin/hour-log.csv", methods=["GET"], endpoint="admin_hour_log_csv")
    @admin_only
    def admin_hour_log_csv():
        period = _period_arg()
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in service.csv_rows(period=period):
            writer.writerow(row)

        filename = f"hour_log_{period}.csv" if period is not None else "hour_log.csv"
        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
