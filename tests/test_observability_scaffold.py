def test_observability_modules_exist():
    import app.obs.context as ctx
    import app.obs.logger as log
    import app.obs.metrics as met
    import app.obs.middleware as mid

    assert hasattr(ctx, "request_id_var")
    assert hasattr(ctx, "user_id_var")
    assert hasattr(log, "log_event")
    assert hasattr(met, "record_timing")
    assert hasattr(met, "inc_counter")
    assert hasattr(met, "get_metrics_snapshot")
    assert hasattr(mid, "ObservabilityMiddleware")


def test_clear_context_resets_vars():
    from app.obs.context import clear_context, request_id_var, user_id_var
    request_id_var.set("abc")
    user_id_var.set(1)
    clear_context()
    assert request_id_var.get() is None
    assert user_id_var.get() is None
