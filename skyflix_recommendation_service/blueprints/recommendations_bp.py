"""Recommendation endpoints and the trending refresh timer."""
import azure.functions as func
import logging
import json

from skyflix_recommendation_service.exceptions import NotFoundError, RecommendationError, ValidationError
from skyflix_recommendation_service.services import InitializationState, RecommendationEngine

# Initialize blueprint
bp = func.Blueprint()

# Initialize engine (one per worker process)
recommendation_engine = RecommendationEngine()

logger = logging.getLogger(__name__)

NO_SIMILAR_SUGGESTIONS = [
    "Try searching with different criteria",
    "Check back later for new content",
]


def _json_response(body: dict, status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(body, default=str),  # default=str handles datetime
        status_code=status_code,
        mimetype="application/json"
    )


def _error_response(message: str, status_code: int) -> func.HttpResponse:
    return _json_response({"success": False, "error": message}, status_code)


def _client_error_response(error: RecommendationError, status_code: int) -> func.HttpResponse:
    """Error body with the code and details the caller needs to correct the request."""
    return _json_response(dict(error.to_dict(), success=False), status_code)


def _parse_id(value: str | None, name: str) -> int:
    if not value:
        raise ValidationError(name, value, "is required")
    try:
        return int(value)
    except ValueError:
        raise ValidationError(name, value, "must be an integer")


@bp.route(
    route="recommendations/personalized/{user_id}",
    methods=["GET"],
    auth_level=func.AuthLevel.ANONYMOUS
)
def get_personalized_recommendations(req: func.HttpRequest) -> func.HttpResponse:
    """Get personalized recommendations for a user."""
    try:
        user_id = _parse_id(req.route_params.get('user_id'), 'user_id')
        recommendations = recommendation_engine.get_personalized_recommendations(user_id)

        return _json_response({
            "success": True,
            "user_id": user_id,
            "count": len(recommendations),
            "recommendations": recommendations
        })

    except ValidationError as e:
        return _client_error_response(e, 400)
    except NotFoundError as e:
        return _client_error_response(e, 404)
    except Exception as e:
        logger.error(f"Error getting personalized recommendations: {str(e)}", exc_info=True)
        return _error_response("Internal server error", 500)


# noinspection PyUnusedLocal
@bp.route(route="recommendations/trending", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_trending_content(req: func.HttpRequest) -> func.HttpResponse:
    """Get trending content from the last 30 days."""
    try:
        snapshot = recommendation_engine.get_trending_content()
        return _json_response(dict(snapshot.to_dict(), success=True))

    except Exception as e:
        logger.error(f"Error getting trending content: {str(e)}", exc_info=True)
        return _error_response("Internal server error", 500)


@bp.route(
    route="recommendations/similar/{film_id}",
    methods=["GET"],
    auth_level=func.AuthLevel.ANONYMOUS
)
def get_similar_content(req: func.HttpRequest) -> func.HttpResponse:
    """Get films similar to a film."""
    try:
        film_id = _parse_id(req.route_params.get('film_id'), 'film_id')
        result = recommendation_engine.get_similar_content(film_id)

        if not result['similar']:
            return _json_response({
                "success": True,
                "message": "No similar content found",
                "similar": [],
                "suggestions": NO_SIMILAR_SUGGESTIONS
            })

        response = {
            "success": True,
            "similar": result['similar'],
            "total_found": len(result['similar'])
        }
        if result.get('debug') is not None:
            response["debug"] = result['debug']

        return _json_response(response)

    except ValidationError as e:
        return _client_error_response(e, 400)
    except NotFoundError as e:
        return _client_error_response(e, 404)
    except Exception as e:
        logger.error(f"Error getting similar content: {str(e)}", exc_info=True)
        return _error_response("Error getting similar content", 500)


@bp.route(route="recommendations/genre/{genre_id}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_genre_recommendations(req: func.HttpRequest) -> func.HttpResponse:
    """
    Get the most popular films in a genre.

    Query Parameters:
        - limit: Number of films (default: 10, must be positive)
    """
    try:
        genre_id = _parse_id(req.route_params.get('genre_id'), 'genre_id')

        raw_limit = req.params.get('limit', 10)
        try:
            limit = int(raw_limit)
        except ValueError:
            raise ValidationError('limit', raw_limit, "must be an integer")

        recommendations = recommendation_engine.get_recommendations_by_genre(genre_id, limit)

        return _json_response({
            "success": True,
            "genre_id": genre_id,
            "count": len(recommendations),
            "recommendations": recommendations
        })

    except ValidationError as e:
        return _client_error_response(e, 400)
    except Exception as e:
        logger.error(f"Error getting genre recommendations: {str(e)}", exc_info=True)
        return _error_response("Internal server error", 500)


# noinspection PyUnusedLocal
@bp.route(route="recommendations/trending/refresh", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
def refresh_trending_cache(req: func.HttpRequest) -> func.HttpResponse:
    """Force a trending cache refresh (admin only)."""
    try:
        snapshot = recommendation_engine.refresh_trending_cache()
        return _json_response({
            "success": True,
            "message": "Trending cache refreshed successfully",
            "count": len(snapshot.entries),
            "last_updated": snapshot.last_update
        })

    except Exception as e:
        logger.error(f"Error refreshing trending cache: {str(e)}", exc_info=True)
        return _error_response("Internal server error", 500)


# noinspection PyUnusedLocal
@bp.route(route="recommendations/stats", methods=["GET"])
def get_recommendation_stats(req: func.HttpRequest) -> func.HttpResponse:
    """
    Get statistics about the recommendation engine.
    """
    try:
        stats = recommendation_engine.get_stats()
        stats['genre_stats'] = recommendation_engine.get_genre_stats()
        return _json_response(stats)

    except Exception as e:
        logger.error(f"Error getting stats: {str(e)}", exc_info=True)
        return _error_response("Internal server error", 500)


# noinspection PyUnusedLocal
@bp.route(route="recommendations/health", methods=["GET"])
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint."""
    return _json_response({
        "status": "healthy",
        "service": "skyflix-recommendation-service",
        "version": "1.0.0",
        "state": recommendation_engine.state.value
    })


# noinspection PyUnusedLocal
@bp.timer_trigger(schedule="0 0 * * * *", arg_name="timer", run_on_startup=True, use_monitor=False)
def refresh_recommendations(timer: func.TimerRequest) -> None:
    """
    Hourly refresh. Builds every read-model until the engine is ready, then
    only the trending cache. Failures keep the previous data in service.
    """
    try:
        if recommendation_engine.state is InitializationState.READY:
            recommendation_engine.refresh_trending_cache()
        else:
            recommendation_engine.initialize_recommendations()
    except Exception as e:
        logger.error(f"Scheduled recommendation refresh failed: {str(e)}", exc_info=True)
