"""Cycle log core: storage model, forecasting and calendar generation.

Modules:
    dates          YYYY-MM-DD string conversion, arithmetic and display formats
    store          CycleLogStore: periods plus per-date records with upsert rules
    prediction     Average cycle length, next period, ovulation and fertile window
    calendar_grid  Annotated month grid for the calendar view
    backup         Backup file export and confirmed import
    share          Share text and temperature chart series
    controller     Command handlers: mutate, persist, re-derive
    config_loader  Load/validate cycle_config.yaml
"""
