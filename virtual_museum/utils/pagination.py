from flask import current_app


def page_args(args, default_limit=None):
    """Read ``page``/``limit`` query args, clamped to sane bounds."""
    max_limit = current_app.config.get("MAX_PAGE_SIZE", 100)
    if default_limit is None:
        default_limit = current_app.config.get("DEFAULT_PAGE_SIZE", 10)
    page = args.get("page", 1, type=int) or 1
    limit = args.get("limit", default_limit, type=int) or default_limit
    return max(page, 1), min(max(limit, 1), max_limit)


def paginate_query(query, page, limit):
    page = max(int(page) if page else 1, 1)
    limit = max(int(limit) if limit else 10, 1)
    items = query.offset((page - 1) * limit).limit(limit).all()
    total = query.order_by(None).count()
    return items, total


def pagination_meta(total, page, limit):
    total_pages = (total + limit - 1) // limit
    return {"total": total, "page": page, "limit": limit, "total_pages": total_pages}
