"""dotnet-packaging: create OS installer packages from .NET projects.

Thin front-end over ``dotnet msbuild``:
- Finds the project file in the working directory
- Checks that the project references Packaging.Targets (after a restore)
- Runs the package-creation target with the requested build properties
- ``install`` adds the Packaging.Targets reference to Directory.Build.props
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
