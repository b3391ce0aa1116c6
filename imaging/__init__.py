from .grayscale import grayscale_grid
from .image_loading import image_to_rgb_samples, load_image, resample_image, smooth_image
