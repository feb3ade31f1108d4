"""
seawave
=======
Steady-state 2D Helmholtz wave fields on triangulated sea meshes, with
periodic wrap-around of the domain rectangle and an absorbing boundary.
"""
