"""Centralized message constants for error messages, validation, and user feedback."""

from __future__ import annotations

class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Track Validation Errors
    EMPTY_TRACK_URI = "Track URI cannot be empty"
    INVALID_TRACK_URI = "Invalid track URI format: {uri}"
    EXPLICIT_TRACK = "Explicit tracks cannot be queued"
    TRACK_TOO_LONG = "Track is longer than {minutes} minutes"
    TRACK_BANNED = "'{name}' has been banned by a class vote"

    # Queue Errors
    NOTHING_PLAYING = "Nothing is currently playing"
    TRACK_NOT_CURRENT = "That track is no longer playing"
    METADATA_NOT_FOUND = "No queue entry found for {uri}"

    # Voting Errors
    VOTE_ALREADY_ACTIVE = "A ban vote is already in progress"
    INSUFFICIENT_ONLINE_USERS = "At least {minimum} users must be online to start a vote"
    TRACK_ALREADY_BANNED = "This track is already banned"
    VOTE_NOT_FOUND = "Vote not found or expired"
    ALREADY_VOTED = "You have already voted"

    # Time/Date Validation Errors
    TIMEZONE_REQUIRED_UTC_DATETIME = "UtcDateTime requires a timezone-aware datetime"

    # Configuration Errors
    INVALID_DATABASE_URL = "Database URL must start with sqlite://"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    PROVIDER_CREDENTIALS_REQUIRED = (
        "PROVIDER__CLIENT_ID, PROVIDER__CLIENT_SECRET and PROVIDER__REFRESH_TOKEN are required"
    )

    # Provider Errors
    PROVIDER_AUTH_FAILED = "Provider rejected our credentials"
    PROVIDER_RATE_LIMITED = "Provider rate limit hit"
    PROVIDER_NO_ACTIVE_DEVICE = "No active playback device"
    PROVIDER_UNAVAILABLE = "Provider request failed: {detail}"
    PROVIDER_MALFORMED_PAYLOAD = "Provider returned a malformed payload: {detail}"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Service Lifecycle
    SERVICE_STARTING = "Starting classroom jukebox ({environment})"
    SERVICE_STOPPED = "Classroom jukebox stopped"
    SERVICE_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down"
    SERVICE_FATAL_ERROR = "Fatal error: %s"
    SHUTDOWN_STEP_FAILED = "Failed during shutdown of %s: %r"

    # Database Lifecycle
    DATABASE_INITIALIZED = "Database initialized at %s"
    DATABASE_CLOSED = "Database manager closed"
    DATABASE_STATS_FAILED = "Failed to collect database stats: %s"

    # Metadata Store
    METADATA_INSERTED = "Stored metadata for %s (added by %s at %s)"
    METADATA_DELETED = "Deleted metadata for %s at %s"
    METADATA_RETIRED = "Retired oldest metadata for %s"
    METADATA_SHIELD_CHANGED = "Shield count for %s at %s is now %d"

    # Sync Job
    SYNC_STARTED = "Queue sync job started (every %.1fs)"
    SYNC_STOPPED = "Queue sync job stopped"
    SYNC_ALREADY_RUNNING = "Queue sync job is already running"
    SYNC_LOOP_ERROR = "Unexpected error in queue sync loop"

    # Reconciliation
    RECONCILE_TICK = "Reconciled queue: current=%s, %d queued"
    RECONCILE_COALESCED = "Reconcile request coalesced into an already completed tick"
    RECONCILE_BOOTSTRAPPED = "Bootstrapped provider-owned metadata for %s"
    RECONCILE_RETIRED = "Retired played metadata for %s (added by %s)"
    RECONCILE_TRACK_ADVANCED = "Track advanced from %s to %s"
    RECONCILE_PROVIDER_ERROR = "Provider error during sync, will retry: %s"
    RECONCILE_NETWORK_ERROR = "Network error connecting to provider, will retry: %s"
    RECONCILE_TIMEOUT = "Reconciliation tick timed out after %.1fs"
    RECONCILE_FAILED = "Reconciliation tick failed: %r"

    # Queue Operations
    QUEUE_ENQUEUED = "Queued '%s' for %s"
    QUEUE_ENQUEUE_FAILED = "Provider enqueue failed for %s, removing metadata: %s"
    QUEUE_COMPENSATION_FAILED = "Could not remove orphaned metadata for %s at %s: %r"
    QUEUE_SKIPPED = "Skipped '%s'"
    QUEUE_SKIP_BLOCKED = "Skip of '%s' blocked by shield (%d remaining)"
    QUEUE_SHIELD_ADDED = "Shield added to %s (now %d)"

    # Broadcast
    BROADCAST_CLIENT_CONNECTED = "Client %s connected (user %s), %d online"
    BROADCAST_CLIENT_DISCONNECTED = "Client %s disconnected, %d online"
    BROADCAST_SEND_FAILED = "Failed to send %s to client %s: %r"
    BROADCAST_PUBLISHED = "Broadcast %s to %d clients (%d failed)"

    # Voting
    VOTE_STARTED = "Ban vote %s started for '%s' by %s (online=%d, required=%d)"
    VOTE_CAST = "Vote %s: %s voted %s (yes=%d, no=%d, required=%d)"
    VOTE_PASSED = "Ban vote %s passed (yes=%d, no=%d)"
    VOTE_FAILED = "Ban vote %s failed: %s (yes=%d, no=%d)"
    VOTE_TIMER_STALE = "Ban vote %s already completed, ignoring expiry"
    VOTE_CALLBACK_ERROR = "Error in ban vote completion handler for %s"
    VOTE_SHUTDOWN = "Cancelled active ban vote %s on shutdown"

    # Bans
    TRACK_BANNED = "Banned %s ('%s')"
    TRACK_UNBANNED = "Unbanned %s"

    # Provider Client
    PROVIDER_TOKEN_REFRESHED = "Provider access token refreshed (expires in %ds)"
    PROVIDER_TOKEN_REFRESH_FAILED = "Failed to refresh provider access token: %s"
    PROVIDER_REQUEST = "Provider %s %s -> %d"
