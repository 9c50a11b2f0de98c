# Coastal Change Dashboard: Shiny for Python
# Coastal records, trend charts, prediction form and shoreline change maps
# (Folium or ipyleaflet backend)

import asyncio
import sys

import plotly.graph_objects as go
from shiny import App, ui, render, reactive
from shinywidgets import output_widget, render_widget

import config
from coastal_api import CoastalApiClient
from coastal_processor import filter_records, unique_regions
from dashboard_views import records_table, trend_figures, prediction_summary
from map_folium import render_folium_html
from map_layers import VizMode, EROSION_LEGEND_COLOR, ACCRETION_LEGEND_COLOR
from map_leaflet import LeafletMapHandle
from prediction_form import FORM_FIELDS, INPUT_IDS, PredictionFormState, submit_form, reset_form
from shoreline_feed import fetch_shoreline_data

print("=" * 50, file=sys.stderr)
print("Coastal Change Dashboard starting...", file=sys.stderr)
print(f"Python version: {sys.version}", file=sys.stderr)
print(f"Backend: {config.COASTAL_API_BASE}  env: {config.APP_ENV}", file=sys.stderr)
print("=" * 50, file=sys.stderr)


def field_error(field):
    return ui.output_ui(f"err_{field}")


def legend_item(color, label):
    return ui.div(
        ui.span(style=f"display:inline-block;width:14px;height:14px;border-radius:50%;background:{color};margin-right:6px;"),
        ui.span(label),
        class_="small",
    )


app_ui = ui.page_navbar(
    ui.nav_panel("🌊 Dashboard",
        ui.h2("Coastal Data", style="padding-top: 20px;"),
        ui.card(
            ui.layout_columns(
                ui.input_select("region_filter", "Region", choices={"": "All"}, selected=""),
                ui.input_text("date_from", "Date From", placeholder="YYYY-MM-DD"),
                ui.input_text("date_to", "Date To", placeholder="YYYY-MM-DD"),
                ui.div(
                    ui.input_action_button("btn_reset_filters", "Reset", class_="btn-outline-secondary w-100"),
                    class_="d-flex align-items-end h-100",
                ),
                col_widths=[4, 3, 3, 2],
            ),
            ui.layout_columns(
                ui.div(ui.h6("Sea Level Trend"), output_widget("chart_sea_level")),
                ui.div(ui.h6("Erosion Rate Trend"), output_widget("chart_erosion_rate")),
                ui.div(ui.h6("Prediction Likelihood"), output_widget("chart_likelihood")),
                col_widths=[4, 4, 4],
            ),
            ui.output_table("coastal_table", class_="table table-striped table-hover align-middle"),
        ),

        ui.h2("Predict Coastal Change"),
        ui.card(
            ui.layout_columns(
                ui.div(ui.input_text(INPUT_IDS["region"], "Region", placeholder="Region"), field_error("region")),
                ui.div(ui.input_text(INPUT_IDS["date"], "Date", placeholder="YYYY-MM-DD"), field_error("date")),
                ui.div(ui.input_numeric(INPUT_IDS["sea_level"], "Sea Level (0–100)", value=None, min=0, max=100, step=0.01),
                       field_error("sea_level")),
                ui.div(ui.input_numeric(INPUT_IDS["erosion_rate"], "Erosion Rate (−10–10)", value=None, min=-10, max=10, step=0.01),
                       field_error("erosion_rate")),
                ui.div(ui.input_numeric(INPUT_IDS["precipitation"], "Precipitation (0–500)", value=None, min=0, max=500, step=0.1),
                       field_error("precipitation")),
                ui.div(
                    ui.input_task_button("btn_predict", "Predict", label_busy="Predicting...", class_="btn-primary w-100 mb-2"),
                    ui.input_action_button("btn_reset_form", "Reset", class_="btn-outline-secondary w-100"),
                    class_="d-flex flex-column justify-content-end",
                ),
                col_widths=[4, 4, 4, 4, 4, 4],
            ),
        ),
        ui.output_ui("prediction_result"),
    ),

    ui.nav_panel("🗺️ Map",
        ui.layout_sidebar(
            ui.sidebar(
                ui.h6("Map Provider"),
                ui.input_radio_buttons("map_backend", "",
                                       choices={"leaflet": "ipyleaflet", "folium": "Folium"},
                                       selected="leaflet"),
                ui.input_switch("usgs_visible", "Show USGS coastal change layers", value=True),
                ui.panel_conditional(
                    "input.map_backend === 'leaflet'",
                    ui.input_radio_buttons("viz_mode", "Visualization",
                                           choices={VizMode.DOTS.value: "Dots", VizMode.HEATMAP.value: "Heatmap"},
                                           selected=VizMode.DOTS.value),
                ),
                ui.hr(),
                ui.h6("Legend"),
                legend_item(EROSION_LEGEND_COLOR, "Erosion (loss)"),
                legend_item(ACCRETION_LEGEND_COLOR, "Accretion (gain)"),
                ui.tags.small("⚫ Size indicates rate", class_="text-muted d-block mt-1"),
                ui.hr(),
                ui.output_text("feed_status"),
                width=300,
            ),
            ui.panel_conditional("input.map_backend === 'leaflet'", output_widget("leaflet_map", height="550px")),
            ui.panel_conditional("input.map_backend === 'folium'", ui.output_ui("folium_map")),
            ui.tags.small(
                "Data sources: OpenStreetMap, Esri, USGS Coastal Change Hazards Portal, ",
                ui.a("USGS Massachusetts Shoreline Change Data", href=config.SHORELINE_DATA_PAGE, target="_blank"),
                class_="text-muted",
            ),
        ),
    ),

    ui.nav_panel("ℹ️ About",
        ui.markdown("""
        ## About

        This project predicts and visualizes the likelihood of coastal changes based on
        environmental data, climate models, and historical trends.

        - **Erosion rate**: shoreline retreat (negative) or accretion (positive), m/year
        - **Transect**: fixed cross-shore survey line used to measure shoreline position
        - **Prediction Likelihood** chart: a visualization score, not a model output
        """),
    ),

    ui.nav_panel("⚙️ Settings",
        ui.h2("User Settings", style="padding-top: 20px;"),
        ui.output_ui("settings_ui"),
    ),

    title="Coastal Change",
    id="navbar",
    footer=ui.div(
        ui.p("USGS Massachusetts Shoreline Change Project • Built with Shiny for Python", class_="text-muted text-center"),
        style="padding: 10px;",
    ),
)


def server(input, output, session):
    print("Server function called", file=sys.stderr)

    client = CoastalApiClient()
    leaflet = LeafletMapHandle(
        on_mode_change=lambda mode: ui.update_radio_buttons("viz_mode", selected=mode.value, session=session),
    )
    form = PredictionFormState()
    form_errors = reactive.Value({})

    def release():
        leaflet.close()
        client.close()
        print("Session resources released", file=sys.stderr)

    session.on_ended(release)

    # -----------------------------------------------------------------
    # Data loading (independent, concurrent)
    # -----------------------------------------------------------------
    @reactive.extended_task
    async def load_coastal():
        return await asyncio.to_thread(client.fetch_coastal_data)

    @reactive.extended_task
    async def load_shoreline():
        return await asyncio.to_thread(fetch_shoreline_data)

    @reactive.Effect
    def start_loading():
        with reactive.isolate():
            load_coastal()
            load_shoreline()

    @reactive.Calc
    def coastal_records():
        if load_coastal.status() == "success":
            return load_coastal.result()
        return []

    @reactive.Calc
    def shoreline_points():
        if load_shoreline.status() == "success":
            return load_shoreline.result()
        return []

    @reactive.Effect
    def report_load_error():
        if load_coastal.status() != "error":
            return
        try:
            load_coastal.result()
        except Exception as e:
            print(f"✗ Error loading coastal data: {e}", file=sys.stderr)
            ui.notification_show(f"Could not load coastal data: {e}", type="error", duration=8)

    # -----------------------------------------------------------------
    # Filters, table, charts
    # -----------------------------------------------------------------
    @reactive.Effect
    def update_region_choices():
        regions = unique_regions(coastal_records())
        choices = {"": "All", **{r: r for r in regions}}
        with reactive.isolate():
            selected = input.region_filter() if input.region_filter() in choices else ""
        ui.update_select("region_filter", choices=choices, selected=selected)

    @reactive.Effect
    @reactive.event(input.btn_reset_filters)
    def reset_filters():
        ui.update_select("region_filter", selected="")
        ui.update_text("date_from", value="")
        ui.update_text("date_to", value="")

    @reactive.Calc
    def filtered_records():
        return filter_records(
            coastal_records(),
            region=input.region_filter(),
            date_from=input.date_from().strip(),
            date_to=input.date_to().strip(),
        )

    @reactive.Calc
    def figures():
        return trend_figures(filtered_records())

    @render_widget
    def chart_sea_level():
        return go.FigureWidget(figures()["sea_level"])

    @render_widget
    def chart_erosion_rate():
        return go.FigureWidget(figures()["erosion_rate"])

    @render_widget
    def chart_likelihood():
        return go.FigureWidget(figures()["likelihood"])

    @output
    @render.table(index=False)
    def coastal_table():
        return records_table(filtered_records())

    # -----------------------------------------------------------------
    # Prediction form
    # -----------------------------------------------------------------
    @ui.bind_task_button(button_id="btn_predict")
    @reactive.extended_task
    async def predict_task(request):
        return await asyncio.to_thread(client.predict_coastal_change, request)

    def form_values():
        return {f: input[INPUT_IDS[f]]() for f in FORM_FIELDS}

    @reactive.Effect
    @reactive.event(input.btn_predict)
    def submit_prediction():
        submit_form(form, form_values(), predict_task, session)
        form_errors.set(dict(form.errors))

    @reactive.Effect
    def release_form():
        if predict_task.status() != "running":
            form.finish()

    @reactive.Effect
    @reactive.event(input.btn_reset_form)
    def reset_prediction_form():
        reset_form(form, session)
        form_errors.set({})

    def make_error_output(field):
        @output(id=f"err_{field}")
        @render.ui
        def _field_error():
            msg = form_errors.get().get(field)
            if msg:
                return ui.div(msg, class_="invalid-feedback d-block")
            return None

    for f in FORM_FIELDS:
        make_error_output(f)

    @output
    @render.ui
    def prediction_result():
        status = predict_task.status()
        if status == "initial":
            return None
        if status == "running":
            return ui.p("Waiting for prediction...", class_="text-muted")
        try:
            result = predict_task.result()
        except Exception as e:
            print(f"✗ Prediction failed: {e}", file=sys.stderr)
            return ui.div(f"❌ Prediction failed: {e}", class_="alert alert-danger")
        summary = prediction_summary(result)
        return ui.card(
            ui.card_header("Prediction Result"),
            ui.p(summary["headline"], class_="fw-bold"),
            ui.tags.pre(summary["raw"]),
        )

    # -----------------------------------------------------------------
    # Maps
    # -----------------------------------------------------------------
    @render_widget
    def leaflet_map():
        return leaflet.map

    @reactive.Effect
    def sync_leaflet_points():
        leaflet.set_points(shoreline_points())

    @reactive.Effect
    def sync_leaflet_overlay():
        leaflet.set_usgs_visible(input.usgs_visible())

    @reactive.Effect
    @reactive.event(input.viz_mode)
    def sync_leaflet_mode():
        leaflet.set_mode(input.viz_mode())

    @output
    @render.ui
    def folium_map():
        return ui.HTML(render_folium_html(shoreline_points(), input.usgs_visible()))

    @output
    @render.text
    def feed_status():
        status = load_shoreline.status()
        if status == "running":
            return "Loading shoreline data..."
        return f"{len(shoreline_points())} shoreline points loaded"

    # -----------------------------------------------------------------
    # Settings
    # -----------------------------------------------------------------
    @output
    @render.ui
    def settings_ui():
        tiles = "Mapbox (API key set)" if config.MAPBOX_API_KEY else "OpenStreetMap (no API key)"
        return ui.tags.dl(
            ui.tags.dt("Backend API"), ui.tags.dd(config.COASTAL_API_BASE),
            ui.tags.dt("Street tiles"), ui.tags.dd(tiles),
            ui.tags.dt("Shoreline feed"), ui.tags.dd(config.SHORELINE_CSV_URL),
            ui.tags.dt("Layer debug panel"), ui.tags.dd("on" if config.is_development() else "off"),
        )


app = App(app_ui, server)
