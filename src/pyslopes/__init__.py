from .errors import SlopesError, InvalidParameter, InvalidConfiguration, ExportError
from .config import DEFAULT_CONFIG, load_config, get_section
from .core import CanvasDimensions
from .noise_tools import NoiseSource, MAX_SEED
from .params import (
    PeaksCurve,
    ParameterSet,
    DrawingVariables,
    DEFAULT_PEAKS_CURVE,
    PRESET_PEAKS_CURVES,
    SLOPES_ASPECT_RATIO,
    transform_parameters,
    random_parameters,
)
from .generator import LineFieldGenerator, generate_lines, get_sample_coordinates
from .occlusion import occlude_line_if_necessary, get_possibly_occluding_row_indices
from .polylines import group_polylines, clip_lines_with_margin, retrace_lines
from .serializer import polylines_to_svg, raster_dimensions, RasterJob
from .pipeline import generate, post_process, build_artwork, Artwork
from .export import export_artwork, ExportResult, PRINT_SIZES
from .worker import GenerationRequest, GenerationResult, GenerationWorker, render_batch

__version__ = "0.1.0"
