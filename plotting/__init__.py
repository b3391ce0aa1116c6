from .mesh_plotting import plot_height_field, plot_mesh, plot_mesh_with_highlighted_edges
